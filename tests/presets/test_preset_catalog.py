import unittest
from typing import Any, Callable, Mapping, Sequence

from presets import DEFAULT_PRESET_ID, Preset, PresetCatalog, defaults, merge, resolve
from settings import InMemorySettingsRepository, SettingsStoreError


class _FailingRepository:
    def __init__(self) -> None:
        self.save_calls = 0

    def load_pomodoro_settings(self) -> Mapping[str, Any]:
        raise SettingsStoreError("disk on fire")

    def save_pomodoro_settings(self, partial: Mapping[str, Any], field_mask: Sequence[str]) -> None:
        self.save_calls += 1
        raise SettingsStoreError("disk on fire")


def _ids() -> Callable[[], str]:
    counter = iter(range(1, 1000))
    return lambda: f"custom-{next(counter)}"


class PresetModelTests(unittest.TestCase):
    def test_durations_are_clamped_into_editor_bounds(self) -> None:
        preset = Preset(
            id="p",
            name="P",
            focus_minutes=999,
            short_break_minutes=0,
            long_break_minutes=-4,
            long_break_interval=0,
        )

        self.assertEqual(480, preset.focus_minutes)
        self.assertEqual(1, preset.short_break_minutes)
        self.assertEqual(1, preset.long_break_minutes)
        self.assertEqual(1, preset.long_break_interval)

    def test_zero_focus_is_kept_only_for_stopwatch(self) -> None:
        stopwatch = Preset(id="s", name="S", kind="stopwatch", focus_minutes=0)
        custom = Preset(id="c", name="C", kind="custom", focus_minutes=0)

        self.assertEqual(0, stopwatch.focus_minutes)
        self.assertEqual(1, custom.focus_minutes)

    def test_non_numeric_values_fall_back_to_field_defaults(self) -> None:
        preset = Preset(
            id="p",
            name="P",
            focus_minutes="abc",  # type: ignore[arg-type]
            short_break_minutes=None,  # type: ignore[arg-type]
            long_break_minutes=float("nan"),  # type: ignore[arg-type]
            long_break_interval=True,  # type: ignore[arg-type]
        )

        self.assertEqual(25, preset.focus_minutes)
        self.assertEqual(5, preset.short_break_minutes)
        self.assertEqual(15, preset.long_break_minutes)
        self.assertEqual(4, preset.long_break_interval)

    def test_unknown_kind_becomes_custom(self) -> None:
        preset = Preset(id="p", name="P", kind="weird")  # type: ignore[arg-type]
        self.assertEqual("custom", preset.kind)

    def test_from_record_reads_camel_case_fields(self) -> None:
        preset = Preset.from_record(
            {
                "id": "custom-1",
                "name": "Deep work",
                "type": "custom",
                "focusMinutes": 50,
                "shortBreakMinutes": 10,
                "longBreakMinutes": 30,
                "longBreakInterval": 3,
                "autoStartBreaks": False,
                "autoStartFocus": True,
            }
        )

        self.assertEqual("Deep work", preset.name)
        self.assertEqual(50, preset.focus_minutes)
        self.assertEqual(10, preset.short_break_minutes)
        self.assertEqual(30, preset.long_break_minutes)
        self.assertEqual(3, preset.long_break_interval)
        self.assertFalse(preset.auto_start_breaks)
        self.assertTrue(preset.auto_start_focus)
        self.assertEqual(preset, Preset.from_record(preset.to_record()))

    def test_from_record_requires_id(self) -> None:
        with self.assertRaises(ValueError):
            Preset.from_record({"name": "No id"})

    def test_with_changes_keeps_identity(self) -> None:
        preset = Preset(id="custom-1", name="Mine")
        edited = preset.with_changes(id="other", is_default=True, focus_minutes=40)

        self.assertEqual("custom-1", edited.id)
        self.assertFalse(edited.is_default)
        self.assertEqual(40, edited.focus_minutes)


class PresetResolutionTests(unittest.TestCase):
    def test_builtins_include_classic_and_stopwatch(self) -> None:
        by_id = {preset.id: preset for preset in defaults()}

        classic = by_id[DEFAULT_PRESET_ID]
        self.assertEqual((25, 5, 15, 4), (
            classic.focus_minutes,
            classic.short_break_minutes,
            classic.long_break_minutes,
            classic.long_break_interval,
        ))
        self.assertTrue(classic.auto_start_breaks)
        self.assertTrue(classic.auto_start_focus)
        self.assertTrue(by_id["stopwatch"].is_stopwatch)
        self.assertEqual(0, by_id["stopwatch"].focus_minutes)
        self.assertTrue(all(preset.is_default for preset in defaults()))

    def test_resolve_falls_back_to_classic(self) -> None:
        self.assertEqual(DEFAULT_PRESET_ID, resolve(None, defaults()).id)
        self.assertEqual(DEFAULT_PRESET_ID, resolve("missing", defaults()).id)
        self.assertEqual("animedoro", resolve("animedoro", defaults()).id)

    def test_merge_tolerates_corrupt_input(self) -> None:
        self.assertEqual(list(defaults()), merge(None))
        self.assertEqual(list(defaults()), merge("not a list"))

        merged = merge(
            [
                {"id": "custom-1", "name": "Mine", "focusMinutes": 40},
                {"id": "custom-1", "name": "Duplicate"},
                {"id": DEFAULT_PRESET_ID, "name": "Shadow", "isDefault": True},
                {"name": "no id"},
                42,
            ]
        )

        user = [preset for preset in merged if not preset.is_default]
        self.assertEqual(["custom-1"], [preset.id for preset in user])
        self.assertEqual("Mine", user[0].name)
        self.assertEqual(len(defaults()) + 1, len(merged))


class PresetCatalogTests(unittest.TestCase):
    def test_load_uses_stored_selection_and_presets(self) -> None:
        repository = InMemorySettingsRepository(
            {
                "selectedPresetId": "custom-7",
                "presets": [{"id": "custom-7", "name": "Seven", "focusMinutes": 7}],
            }
        )
        catalog = PresetCatalog(repository)

        active = catalog.load()

        self.assertEqual("custom-7", active.id)
        self.assertEqual(7, catalog.active.focus_minutes)

    def test_load_with_unknown_selection_resolves_to_classic(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository({"selectedPresetId": "gone"}))
        self.assertEqual(DEFAULT_PRESET_ID, catalog.load().id)

    def test_load_failure_falls_back_to_defaults(self) -> None:
        catalog = PresetCatalog(_FailingRepository())

        with self.assertLogs("presets", level="WARNING"):
            active = catalog.load()

        self.assertEqual(DEFAULT_PRESET_ID, active.id)
        self.assertEqual(list(defaults()), list(catalog.presets))

    def test_select_persists_only_the_selection(self) -> None:
        repository = InMemorySettingsRepository()
        catalog = PresetCatalog(repository)
        catalog.load()

        catalog.select("animedoro")

        stored = repository.load_pomodoro_settings()
        self.assertEqual({"selectedPresetId": "animedoro"}, dict(stored))
        self.assertEqual("animedoro", catalog.active.id)

    def test_create_adds_and_selects_custom_preset(self) -> None:
        repository = InMemorySettingsRepository()
        catalog = PresetCatalog(repository, id_factory=_ids())
        catalog.load()

        preset = catalog.create(name="Mine", focus_minutes=40)

        self.assertEqual("custom-1", preset.id)
        self.assertEqual("custom", preset.kind)
        self.assertEqual("custom-1", catalog.selected_id)
        stored = repository.load_pomodoro_settings()
        self.assertEqual("custom-1", stored["selectedPresetId"])
        self.assertEqual(["custom-1"], [record["id"] for record in stored["presets"]])

    def test_create_generates_unique_ids(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository(), id_factory=lambda: "custom-1")
        catalog.load()

        first = catalog.create()
        second = catalog.create()

        self.assertEqual("custom-1", first.id)
        self.assertEqual("custom-1-1", second.id)

    def test_update_of_builtin_creates_a_user_copy(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository(), id_factory=_ids())
        catalog.load()

        edited = catalog.update(DEFAULT_PRESET_ID, focus_minutes=30)

        self.assertEqual("custom-1", edited.id)
        self.assertEqual("Classic Pomodoro (Custom)", edited.name)
        self.assertEqual(30, edited.focus_minutes)
        self.assertEqual(25, catalog.get(DEFAULT_PRESET_ID).focus_minutes)

    def test_update_of_user_preset_edits_in_place(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository(), id_factory=_ids())
        catalog.load()
        created = catalog.create(name="Mine")

        edited = catalog.update(created.id, focus_minutes=5000)

        self.assertEqual(created.id, edited.id)
        self.assertEqual(480, catalog.get(created.id).focus_minutes)

    def test_update_unknown_preset_raises(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository())
        with self.assertRaises(KeyError):
            catalog.update("nope", focus_minutes=10)

    def test_delete_refuses_builtins_and_reselects_classic(self) -> None:
        catalog = PresetCatalog(InMemorySettingsRepository(), id_factory=_ids())
        catalog.load()
        created = catalog.create(name="Mine")

        self.assertFalse(catalog.delete("stopwatch"))
        self.assertTrue(catalog.delete(created.id))
        self.assertIsNone(catalog.get(created.id))
        self.assertEqual(DEFAULT_PRESET_ID, catalog.selected_id)

    def test_save_failure_keeps_in_memory_state(self) -> None:
        repository = _FailingRepository()
        catalog = PresetCatalog(repository)

        with self.assertLogs("presets", level="WARNING") as logs:
            catalog.select("animedoro")

        self.assertEqual("animedoro", catalog.active.id)
        self.assertEqual(1, repository.save_calls)
        self.assertTrue(any("Failed to save" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
