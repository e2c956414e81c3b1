import json
from pathlib import Path

import pytest

from alchemy.data.database import load_database, parse_form_id, save_plugin
from alchemy.errors import DataUnavailableError
from alchemy.world import create_world


DATABASE = {
    "plugins": [
        {
            "name": "Skyrim.esm",
            "flags": [],
            "ingredients": [
                {
                    "form_id": "0x0006BC00",
                    "name": "Bear Claws",
                    "effects": [
                        {"effect_id": "0x0003EB01", "name": "Restore Stamina", "magnitude": 1.0, "area": 0, "duration": 0},
                        {"effect_id": "0x0003EB0C", "name": "Fortify Health", "magnitude": 2.5, "area": 0, "duration": 60},
                    ],
                },
            ],
        },
        {
            "name": "Update.esm",
            "ingredients": [
                {"form_id": 441344, "name": "Bear Claws", "effects": []},
            ],
        },
    ]
}


def _write(tmp_path: Path, payload) -> Path:
    path = tmp_path / "records.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_parse_form_id_accepts_ints_and_hex():
    assert parse_form_id(0x10) == 16
    assert parse_form_id("0x0006BC00") == 0x6BC00
    assert parse_form_id("6BC00") == 0x6BC00
    with pytest.raises(DataUnavailableError):
        parse_form_id("not-an-id")


def test_load_database_creates_plugins_and_records(tmp_path: Path):
    world = create_world(seed=1)

    store = load_database(world, _write(tmp_path, DATABASE))

    skyrim, update = store.plugins()
    assert store.plugin(skyrim).name == "Skyrim.esm"
    assert store.plugin(update).load_order > store.plugin(skyrim).load_order
    (master,) = store.records_in_plugin(skyrim)
    assert store.identity(master) == 0x6BC00
    effects = store.get_effect_entries(master)
    assert [effect.effect_name for effect in effects] == ["Restore Stamina", "Fortify Health"]
    assert effects[1].duration == 60
    (override,) = store.records_in_plugin(update)
    assert store.resolve_winning_override(master) == override


@pytest.mark.parametrize(
    "payload",
    [{"records": []}, {"plugins": [{"name": "Broken.esp", "ingredients": [{"name": "No id"}]}]}],
)
def test_load_database_rejects_malformed_payloads(tmp_path: Path, payload):
    with pytest.raises(DataUnavailableError):
        load_database(create_world(seed=1), _write(tmp_path, payload))


def test_load_database_reports_missing_file(tmp_path: Path):
    with pytest.raises(DataUnavailableError):
        load_database(create_world(seed=1), tmp_path / "missing.json")


def test_save_plugin_round_trips_through_load(tmp_path: Path):
    store = load_database(create_world(seed=1), _write(tmp_path, DATABASE))
    skyrim = store.plugins()[0]
    store.set_plugin_flag(skyrim, "ESL", True)

    out = save_plugin(store, skyrim, tmp_path / "out" / "patch.json")

    saved = json.loads(out.read_text(encoding="utf-8"))
    plugin = saved["plugins"][0]
    assert plugin["name"] == "Skyrim.esm"
    assert plugin["flags"] == ["ESL"]
    assert plugin["ingredients"][0]["form_id"] == "0x0006BC00"
    assert plugin["ingredients"][0]["effects"][0]["effect_id"] == "0x0003EB01"
    reloaded = load_database(create_world(seed=2), out)
    (record,) = reloaded.records_in_plugin(reloaded.plugins()[0])
    assert reloaded.get_effect_entries(record) == store.get_effect_entries(store.records_in_plugin(skyrim)[0])
