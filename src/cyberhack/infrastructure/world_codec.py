from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping

from cyberhack.domain.models.contact import RELATIONSHIP_MAX, RELATIONSHIP_MIN, Contact
from cyberhack.domain.models.dialogue import ConversationState
from cyberhack.domain.models.faction import Faction, clamp_standing
from cyberhack.domain.models.network import CompromiseStage, File, Network, Process, Service, System, Vulnerability
from cyberhack.domain.models.player import Player
from cyberhack.domain.models.quest import Objective, Quest, QuestReward
from cyberhack.domain.models.world import GameMode, WorldState


FORMAT_VERSION = 1


class WorldDecodeError(ValueError):
    pass


def _encode_system(system: System) -> Dict[str, Any]:
    row = asdict(system)
    row["stage"] = int(system.stage)
    row["processes"] = [asdict(process) for process in system.processes.values()]
    row["files"] = [asdict(item) for item in system.files.values()]
    row["wiped_files"] = [asdict(item) for item in system.wiped_files.values()]
    return row


def _encode_quest(quest: Quest | None) -> Dict[str, Any] | None:
    if quest is None:
        return None
    return {
        "id": quest.id,
        "title": quest.title,
        "description": quest.description,
        "chapter": quest.chapter,
        "difficulty": quest.difficulty,
        "objectives": [asdict(objective) for objective in quest.objectives],
        "reward": {
            "experience": quest.reward.experience,
            "money": quest.reward.money,
            "items": list(quest.reward.items),
            "standings": [[faction, delta] for faction, delta in quest.reward.standings],
            "flags": list(quest.reward.flags),
        },
    }


def encode_world(world: WorldState) -> Dict[str, Any]:
    """Whole-world snapshot as plain JSON types."""

    return {
        "format_version": FORMAT_VERSION,
        "seed": world.seed,
        "turn": world.turn,
        "mode": world.mode.value,
        "chapter": world.chapter,
        "player": asdict(world.player),
        "networks": [
            {
                "address": network.address,
                "name": network.name,
                "security_level": network.security_level,
                "firewall_strength": network.firewall_strength,
                "intrusion_detection": network.intrusion_detection,
                "systems": [_encode_system(system) for system in network.systems.values()],
            }
            for network in world.networks.values()
        ],
        "quest": _encode_quest(world.quest),
        "completed_quest_ids": list(world.completed_quest_ids),
        "factions": [asdict(faction) for faction in world.factions.values()],
        "standings": dict(world.standings),
        "contacts": [asdict(contact) for contact in world.contacts.values()],
        "story_flags": dict(world.story_flags),
        "conversations": {key: asdict(state) for key, state in world.conversations.items()},
        "met_characters": list(world.met_characters),
        "ending_id": world.ending_id,
    }


def _decode_file(row: Mapping[str, Any]) -> File:
    return File(
        name=str(row["name"]),
        content=str(row.get("content", "")),
        size_kb=int(row.get("size_kb", 1)),
        permissions=str(row.get("permissions", "rw-r--r--")),
        encrypted=bool(row.get("encrypted", False)),
        password=row.get("password"),
    )


def _decode_system(row: Mapping[str, Any]) -> System:
    files = [_decode_file(item) for item in row.get("files", [])]
    wiped = [_decode_file(item) for item in row.get("wiped_files", [])]
    processes = [Process(pid=int(item["pid"]), name=str(item["name"]), user=str(item.get("user", "root"))) for item in row.get("processes", [])]
    return System(
        address=str(row["address"]),
        name=str(row.get("name", "")),
        os=str(row.get("os", "Linux")),
        security_level=int(row.get("security_level", 1)),
        firewall_strength=int(row.get("firewall_strength", 1)),
        intrusion_detection=bool(row.get("intrusion_detection", False)),
        stage=CompromiseStage(int(row.get("stage", CompromiseStage.SCANNED))),
        files={item.name: item for item in files},
        services=[Service(**item) for item in row.get("services", [])],
        vulnerabilities=[Vulnerability(**item) for item in row.get("vulnerabilities", [])],
        processes={process.pid: process for process in processes},
        backdoor_installed=bool(row.get("backdoor_installed", False)),
        nmap_scanned=bool(row.get("nmap_scanned", False)),
        mounted_devices=[str(item) for item in row.get("mounted_devices", [])],
        wiped_files={item.name: item for item in wiped},
        lockout_until_turn=int(row.get("lockout_until_turn", 0)),
    )


def _decode_quest(row: Mapping[str, Any] | None) -> Quest | None:
    if row is None:
        return None
    reward = row.get("reward", {})
    return Quest(
        id=str(row["id"]),
        title=str(row.get("title", row["id"])),
        description=str(row.get("description", "")),
        chapter=int(row.get("chapter", 1)),
        difficulty=int(row.get("difficulty", 1)),
        objectives=[Objective(**item) for item in row.get("objectives", [])],
        reward=QuestReward(
            experience=int(reward.get("experience", 0)),
            money=int(reward.get("money", 0)),
            items=tuple(str(item) for item in reward.get("items", [])),
            standings=tuple((str(faction), int(delta)) for faction, delta in reward.get("standings", [])),
            flags=tuple(str(flag) for flag in reward.get("flags", [])),
        ),
    )


def decode_world(payload: Mapping[str, Any]) -> WorldState:
    """Rebuild a WorldState. Raises ``WorldDecodeError`` on any malformed field."""

    if not isinstance(payload, Mapping):
        raise WorldDecodeError("payload must be an object")
    version = payload.get("format_version")
    if version != FORMAT_VERSION:
        raise WorldDecodeError(f"unsupported format version {version!r}")
    try:
        networks: Dict[str, Network] = {}
        for row in payload["networks"]:
            systems = [_decode_system(item) for item in row.get("systems", [])]
            networks[str(row["address"])] = Network(
                address=str(row["address"]),
                name=str(row.get("name", "")),
                security_level=int(row.get("security_level", 1)),
                firewall_strength=int(row.get("firewall_strength", 1)),
                intrusion_detection=bool(row.get("intrusion_detection", False)),
                systems={system.address: system for system in systems},
            )
        factions = [Faction(**row) for row in payload.get("factions", [])]
        contacts = [Contact(**row) for row in payload.get("contacts", [])]
        for contact in contacts:
            contact.relationship = max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, int(contact.relationship)))
        return WorldState(
            player=Player(**payload["player"]),
            seed=int(payload.get("seed", 0)),
            turn=int(payload.get("turn", 0)),
            mode=GameMode(payload.get("mode", GameMode.STORY.value)),
            networks=networks,
            quest=_decode_quest(payload.get("quest")),
            completed_quest_ids=[str(item) for item in payload.get("completed_quest_ids", [])],
            chapter=int(payload.get("chapter", 1)),
            factions={faction.id: faction for faction in factions},
            standings={str(key): clamp_standing(value) for key, value in dict(payload.get("standings", {})).items()},
            contacts={contact.id: contact for contact in contacts},
            story_flags={str(key): bool(value) for key, value in dict(payload.get("story_flags", {})).items()},
            conversations={
                str(key): ConversationState(**value) for key, value in dict(payload.get("conversations", {})).items()
            },
            met_characters=[str(item) for item in payload.get("met_characters", [])],
            ending_id=payload.get("ending_id"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise WorldDecodeError(f"malformed save payload: {exc}") from exc
