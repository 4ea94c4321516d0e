from __future__ import annotations

from typing import Optional

from cyberhack.domain.models.quest import ANY_TARGET, Objective, Quest, QuestReward


FINAL_CHAPTER = 6

_CHAPTERS = (
    {
        "id": "mission_start",
        "title": "Mission start",
        "description": "Shadow wants proof you can work a network before trusting you with NEXUS.",
        "objectives": (
            ("Scan the 192.168.1.0/24 range", "scan", "192.168.1"),
            ("Connect to any discovered host", "connect", ANY_TARGET),
            ("List the files on the host", "ls", ANY_TARGET),
        ),
        "reward": QuestReward(experience=500, standings=(("CyberFreedom", 5),), flags=("tutorial_complete",)),
        "difficulty": 1,
    },
    {
        "id": "find_nexus_network",
        "title": "Find the NEXUS network",
        "description": "Locate NEXUS Corporation's perimeter and map its gateway.",
        "objectives": (
            ("Scan nexus.corp", "scan", "nexus.corp"),
            ("Fingerprint the NEXUS gateway", "nmap", "nexus.corp"),
        ),
        "reward": QuestReward(experience=1000, money=2000, flags=("nexus_located",)),
        "difficulty": 2,
    },
    {
        "id": "penetrate_nexus",
        "title": "Penetrate NEXUS",
        "description": "Break into the NEXUS application server and keep a way back in.",
        "objectives": (
            ("Exploit nexus_server", "exploit", "nexus_server"),
            ("Plant a backdoor on nexus_server", "backdoor", "nexus_server"),
        ),
        "reward": QuestReward(experience=1500, money=3000, standings=(("NEXUS", -10),), flags=("nexus_breached",)),
        "difficulty": 3,
    },
    {
        "id": "project_apocalypse",
        "title": "Project Apocalypse",
        "description": "Something called Project Apocalypse is hidden inside NEXUS. Find out what it is.",
        "objectives": (
            ("Work a NEXUS employee for credentials", "social", ANY_TARGET),
            ("Decrypt the project dossier", "decrypt", "project_apocalypse.enc"),
            ("Hide your presence on nexus_server", "rootkit", "nexus_server"),
        ),
        "reward": QuestReward(experience=2000, money=7500, items=("NEXUS insider badge",), flags=("apocalypse_revealed",)),
        "difficulty": 4,
    },
    {
        "id": "disable_doomsday",
        "title": "Disable the doomsday timer",
        "description": "The launch controller at nuclear.gov is counting down. Stop it.",
        "objectives": (
            ("Exploit the nuclear control host", "exploit", "nuclear_control"),
            ("Kill the launch control process", "kill", "1234"),
        ),
        "reward": QuestReward(
            experience=3000,
            money=15000,
            standings=(("CyberFreedom", 20), ("GovernmentCoalition", 10)),
            flags=("timer_disabled",),
        ),
        "difficulty": 5,
    },
    {
        "id": "expose_nexus",
        "title": "Expose NEXUS",
        "description": "Take the evidence and put it where NEXUS cannot bury it.",
        "objectives": (
            ("Download the evidence package", "download", "evidence_package.txt"),
            ("Publish it through a public mirror", "upload", "evidence_package.txt"),
        ),
        "reward": QuestReward(experience=5000, standings=(("NEXUS", -25),), flags=("nexus_exposed", "game_completed")),
        "difficulty": 5,
    },
)


def quest_for_chapter(chapter: int) -> Optional[Quest]:
    """Fresh quest for ``chapter``; ``None`` once the story has nothing further."""

    index = int(chapter) - 1
    if index < 0 or index >= len(_CHAPTERS):
        return None
    row = _CHAPTERS[index]
    return Quest(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        chapter=int(chapter),
        objectives=[Objective(description=text, action=verb, target=target) for text, verb, target in row["objectives"]],
        reward=row["reward"],
        difficulty=int(row["difficulty"]),
    )
