from __future__ import annotations

from typing import Any, Dict, List, Mapping

from cyberhack.application.services.world_conditions import is_known_requirement
from cyberhack.domain.models.dialogue import (
    EFFECT_KINDS,
    DialogueEffect,
    DialogueNode,
    DialogueOption,
    DialogueTree,
    SkillCheck,
    TextVariant,
)


def _is_int(value: object) -> bool:
    if isinstance(value, bool):
        return False
    try:
        int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return True


def validate_dialogue_content(payload: object) -> list[str]:
    """Return every schema problem in a dialogue payload; an empty list means valid."""

    errors: list[str] = []
    if not isinstance(payload, dict):
        return ["payload must be an object"]
    characters = payload.get("characters")
    if not isinstance(characters, dict):
        return ["payload.characters must be an object"]

    def _check_requires(owner: str, value: object) -> None:
        if value is None:
            return
        if not isinstance(value, list):
            errors.append(f"{owner} must be a list")
            return
        for index, token in enumerate(value):
            if not is_known_requirement(str(token)):
                errors.append(f"{owner}[{index}] '{token}' is not a recognised requirement")

    for character_id, tree in characters.items():
        prefix = f"characters.{character_id}"
        if not str(character_id or "").strip():
            errors.append("character id cannot be empty")
            continue
        if not isinstance(tree, dict):
            errors.append(f"{prefix} must be an object")
            continue
        if not str(tree.get("name", "")).strip():
            errors.append(f"{prefix}.name is required")
        nodes = tree.get("nodes")
        if not isinstance(nodes, dict) or not nodes:
            errors.append(f"{prefix}.nodes must be a non-empty object")
            continue
        root = str(tree.get("root", "")).strip()
        if root not in nodes:
            errors.append(f"{prefix}.root '{root}' is not a node")

        for node_id, node in nodes.items():
            node_prefix = f"{prefix}.nodes.{node_id}"
            if not isinstance(node, dict):
                errors.append(f"{node_prefix} must be an object")
                continue
            if not str(node.get("text", "")).strip():
                errors.append(f"{node_prefix}.text is required")
            variants = node.get("variants", [])
            if not isinstance(variants, list):
                errors.append(f"{node_prefix}.variants must be a list")
                variants = []
            for index, variant in enumerate(variants):
                variant_prefix = f"{node_prefix}.variants[{index}]"
                if not isinstance(variant, dict):
                    errors.append(f"{variant_prefix} must be an object")
                    continue
                if not str(variant.get("text", "")).strip():
                    errors.append(f"{variant_prefix}.text is required")
                _check_requires(f"{variant_prefix}.requires", variant.get("requires", []))

            options = node.get("options", [])
            if not isinstance(options, list):
                errors.append(f"{node_prefix}.options must be a list")
                continue
            seen: set[str] = set()
            for index, option in enumerate(options):
                option_prefix = f"{node_prefix}.options[{index}]"
                if not isinstance(option, dict):
                    errors.append(f"{option_prefix} must be an object")
                    continue
                option_id = str(option.get("id", "")).strip().lower()
                if not option_id:
                    errors.append(f"{option_prefix}.id is required")
                elif option_id in seen:
                    errors.append(f"{option_prefix}.id '{option_id}' is duplicated")
                seen.add(option_id)
                if not str(option.get("text", "")).strip():
                    errors.append(f"{option_prefix}.text is required")
                _check_requires(f"{option_prefix}.requires", option.get("requires", []))

                target = option.get("target")
                if target is not None and str(target) not in nodes:
                    errors.append(f"{option_prefix}.target '{target}' is not a node")
                check = option.get("skill_check")
                if check is not None:
                    if not isinstance(check, dict):
                        errors.append(f"{option_prefix}.skill_check must be an object")
                    else:
                        if not str(check.get("skill", "")).strip():
                            errors.append(f"{option_prefix}.skill_check.skill is required")
                        if not _is_int(check.get("difficulty")) or not 0 <= int(check["difficulty"]) <= 100:
                            errors.append(f"{option_prefix}.skill_check.difficulty must be an integer 0-100")
                        for key in ("success", "failure", "critical_success", "critical_failure"):
                            node_ref = check.get(key)
                            if node_ref is None and key in {"success", "failure"}:
                                errors.append(f"{option_prefix}.skill_check.{key} is required")
                            elif node_ref is not None and str(node_ref) not in nodes:
                                errors.append(f"{option_prefix}.skill_check.{key} '{node_ref}' is not a node")
                if option.get("relationship") is not None and not _is_int(option.get("relationship")):
                    errors.append(f"{option_prefix}.relationship must be an integer")
                standings = option.get("standings", {})
                if not isinstance(standings, dict) or not all(_is_int(value) for value in standings.values()):
                    errors.append(f"{option_prefix}.standings must map faction ids to integers")
                effects = option.get("effects", [])
                if not isinstance(effects, list):
                    errors.append(f"{option_prefix}.effects must be a list")
                    continue
                for effect_index, effect in enumerate(effects):
                    effect_prefix = f"{option_prefix}.effects[{effect_index}]"
                    if not isinstance(effect, dict):
                        errors.append(f"{effect_prefix} must be an object")
                        continue
                    kind = str(effect.get("kind", "")).strip().lower()
                    if kind not in EFFECT_KINDS:
                        errors.append(f"{effect_prefix}.kind must be one of {'|'.join(EFFECT_KINDS)}")
                    elif kind in {"give_money", "take_money", "stress", "experience"} and not _is_int(effect.get("amount")):
                        errors.append(f"{effect_prefix}.amount must be an integer")
                    elif kind in {"give_item", "take_item", "set_flag", "clear_flag"} and not str(effect.get("value", "")).strip():
                        errors.append(f"{effect_prefix}.value is required")
    return errors


def _option_from_row(row: Mapping[str, Any]) -> DialogueOption:
    check_row = row.get("skill_check")
    skill_check = None
    if isinstance(check_row, Mapping):
        skill_check = SkillCheck(
            skill=str(check_row["skill"]),
            difficulty=int(check_row["difficulty"]),
            success_node=str(check_row["success"]),
            failure_node=str(check_row["failure"]),
            critical_success_node=check_row.get("critical_success"),
            critical_failure_node=check_row.get("critical_failure"),
        )
    target = row.get("target")
    return DialogueOption(
        id=str(row["id"]).strip().lower(),
        text=str(row["text"]),
        requires=tuple(str(token) for token in row.get("requires", [])),
        target_node=str(target) if target is not None else None,
        skill_check=skill_check,
        relationship_delta=int(row.get("relationship", 0) or 0),
        standing_deltas=tuple((str(key), int(value)) for key, value in dict(row.get("standings", {})).items()),
        effects=tuple(
            DialogueEffect(
                kind=str(effect["kind"]).strip().lower(),
                value=str(effect.get("value", "")),
                amount=int(effect.get("amount", 0) or 0),
            )
            for effect in row.get("effects", [])
        ),
    )


def build_dialogue_library(payload: Mapping[str, Any]) -> Dict[str, DialogueTree]:
    """Convert validated JSON into dialogue trees keyed by character id."""

    library: Dict[str, DialogueTree] = {}
    for character_id, tree in dict(payload.get("characters", {})).items():
        nodes: Dict[str, DialogueNode] = {}
        for node_id, node in dict(tree.get("nodes", {})).items():
            nodes[str(node_id)] = DialogueNode(
                id=str(node_id),
                speaker=str(node.get("speaker", tree.get("name", character_id))),
                text=str(node["text"]),
                variants=tuple(
                    TextVariant(
                        text=str(variant["text"]),
                        requires=tuple(str(token) for token in variant.get("requires", [])),
                        mood=str(variant.get("mood", "")),
                    )
                    for variant in node.get("variants", [])
                ),
                options=tuple(_option_from_row(option) for option in node.get("options", [])),
            )
        key = str(character_id).strip().lower()
        library[key] = DialogueTree(
            character_id=key,
            name=str(tree.get("name", character_id)),
            root=str(tree["root"]),
            nodes=nodes,
            faction_id=tree.get("faction"),
        )
    return library


def character_ids(library: Mapping[str, DialogueTree]) -> List[str]:
    return sorted(library)
