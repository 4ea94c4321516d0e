from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cyberhack.domain.errors import ActionBlocked, UnknownVerbError


class Verb(str, Enum):
    SCAN = "scan"
    NMAP = "nmap"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    LS = "ls"
    CAT = "cat"
    CD = "cd"
    PWD = "pwd"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    EXPLOIT = "exploit"
    CRACK = "crack"
    DECRYPT = "decrypt"
    BACKDOOR = "backdoor"
    ROOTKIT = "rootkit"
    TRACE = "trace"
    PROXY = "proxy"
    TOR = "tor"
    VPN = "vpn"
    SOCIAL = "social"
    DDOS = "ddos"
    MITM = "mitm"
    KEYLOG = "keylog"
    SCREEN = "screen"
    WEBCAM = "webcam"
    MIC = "mic"
    MAIL = "mail"
    DB = "db"
    LOG = "log"
    PS = "ps"
    KILL = "kill"
    MOUNT = "mount"
    FORMAT = "format"
    WIPE = "wipe"
    RECOVER = "recover"
    ANALYZE = "analyze"
    DISASM = "disasm"
    DEBUG = "debug"
    COMPILE = "compile"
    RUN = "run"
    STATUS = "status"
    INVENTORY = "inventory"
    SKILLS = "skills"
    CONTACTS = "contacts"
    QUEST = "quest"
    SAVE = "save"
    LOAD = "load"
    QUIT = "quit"
    SANDBOX = "sandbox"
    STORY = "story"


USAGE = {
    Verb.SCAN: "scan <range>",
    Verb.NMAP: "nmap <host>",
    Verb.CONNECT: "connect <host>",
    Verb.CAT: "cat <file>",
    Verb.CD: "cd <directory>",
    Verb.DOWNLOAD: "download <file>",
    Verb.UPLOAD: "upload <file>",
    Verb.EXPLOIT: "exploit <vulnerability>",
    Verb.CRACK: "crack <file>",
    Verb.DECRYPT: "decrypt <file> [key]",
    Verb.TRACE: "trace <host>",
    Verb.PROXY: "proxy <host>",
    Verb.VPN: "vpn <server>",
    Verb.SOCIAL: "social <target>",
    Verb.DDOS: "ddos <target>",
    Verb.MITM: "mitm <target1> <target2>",
    Verb.DB: "db <query>",
    Verb.LOG: "log <service>",
    Verb.KILL: "kill <pid>",
    Verb.MOUNT: "mount <device>",
    Verb.FORMAT: "format <device>",
    Verb.WIPE: "wipe <file>",
    Verb.RECOVER: "recover <file>",
    Verb.ANALYZE: "analyze <file>",
    Verb.DISASM: "disasm <file>",
    Verb.DEBUG: "debug <file>",
    Verb.COMPILE: "compile <file>",
    Verb.RUN: "run <file>",
}


@dataclass(frozen=True)
class Command:
    verb: Verb
    args: tuple[str, ...] = ()
    raw: str = ""

    def arg(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.args):
            return self.args[index]
        return None

    def require(self, index: int) -> str:
        value = self.arg(index)
        if value is None or not value.strip():
            raise ActionBlocked(f"Usage: {USAGE.get(self.verb, self.verb.value)}")
        return value

    def rest(self, start: int = 0) -> str:
        return " ".join(self.args[start:])


def parse_command(raw: str) -> Command:
    """Split ``raw`` into a verb and arguments. Unknown verbs never reach a handler."""

    text = str(raw or "").strip()
    try:
        tokens = shlex.split(text)
    except ValueError:
        tokens = text.split()
    if not tokens:
        raise UnknownVerbError("")
    head = tokens[0].lower()
    try:
        verb = Verb(head)
    except ValueError:
        raise UnknownVerbError(head) from None
    return Command(verb=verb, args=tuple(tokens[1:]), raw=text)
