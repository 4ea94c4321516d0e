from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from cyberhack.application.commands import Command, Verb
from cyberhack.application.services import balance_tables as bt
from cyberhack.application.services.chance import ChanceRoller, Roll, resolve_chance
from cyberhack.application.services.event_bus import EventBus
from cyberhack.application.services.host_generator import HostGenerator
from cyberhack.domain.errors import ActionBlocked, ActionError, TargetNotFound
from cyberhack.domain.events import IntrusionDetected
from cyberhack.domain.models.network import CompromiseStage, File, Network, System
from cyberhack.domain.models.player import ANONYMITY_CAP, LOCAL_TERMINAL
from cyberhack.domain.models.world import WorldState
from cyberhack.domain.outcomes import ActionOutcome, OutcomeStatus


_logger = logging.getLogger(__name__)

Handler = Callable[[WorldState, Command], ActionOutcome]

STORY_FILE_FLAGS = (
    ("apocalypse", "project_apocalypse_decrypted"),
    ("nuclear", "nuclear_codes_found"),
    ("evidence", "evidence_secured"),
)


def connect_chance(network: Network, system: System) -> float:
    if system.backdoor_installed:
        return resolve_chance(1.0)
    if int(network.firewall_strength) <= bt.CONNECT_FIREWALL_THRESHOLD:
        return resolve_chance(bt.CONNECT_CHANCE_SOFT_FIREWALL)
    return resolve_chance(bt.CONNECT_CHANCE_HARD_FIREWALL)


def exploit_chance(hacking: int, severity: int) -> float:
    return resolve_chance(bt.EXPLOIT_BASE, hacking, bt.EXPLOIT_SEVERITY_PENALTY * int(severity))


def detection_active(network: Network, system: System) -> bool:
    return bool(network.intrusion_detection or system.intrusion_detection)


class ActionResolver:
    """Resolves hacking verbs against a WorldState.

    Handlers raise ``ActionBlocked``/``TargetNotFound`` for deterministic refusals and
    otherwise return an outcome after mutating the world. Standing deltas are only
    recorded on the outcome; the faction graph applies them.
    """

    def __init__(
        self,
        roller: ChanceRoller,
        host_generator: Optional[HostGenerator] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.roller = roller
        self.hosts = host_generator or HostGenerator()
        self.event_bus = event_bus
        self._handlers: Dict[Verb, Handler] = {
            Verb.SCAN: self.scan,
            Verb.NMAP: self.nmap,
            Verb.CONNECT: self.connect,
            Verb.DISCONNECT: self.disconnect,
            Verb.LS: self.ls,
            Verb.CAT: self.cat,
            Verb.CD: self.cd,
            Verb.PWD: self.pwd,
            Verb.DOWNLOAD: self.download,
            Verb.UPLOAD: self.upload,
            Verb.EXPLOIT: self.exploit,
            Verb.CRACK: self.crack,
            Verb.DECRYPT: self.decrypt,
            Verb.BACKDOOR: self.backdoor,
            Verb.ROOTKIT: self.rootkit,
            Verb.TRACE: self.trace,
            Verb.PROXY: self.proxy,
            Verb.TOR: self.tor,
            Verb.VPN: self.vpn,
            Verb.SOCIAL: self.social,
            Verb.DDOS: self.ddos,
            Verb.MITM: self.mitm,
            Verb.KEYLOG: self.keylog,
            Verb.SCREEN: self.screen,
            Verb.WEBCAM: self.webcam,
            Verb.MIC: self.mic,
            Verb.MAIL: self.mail,
            Verb.DB: self.db,
            Verb.LOG: self.log,
            Verb.PS: self.ps,
            Verb.KILL: self.kill,
            Verb.MOUNT: self.mount,
            Verb.FORMAT: self.format,
            Verb.WIPE: self.wipe,
            Verb.RECOVER: self.recover,
            Verb.ANALYZE: self.analyze,
            Verb.DISASM: self.disasm,
            Verb.DEBUG: self.debug,
            Verb.COMPILE: self.compile,
            Verb.RUN: self.run,
        }

    def handles(self, verb: Verb) -> bool:
        return verb in self._handlers

    def resolve(self, world: WorldState, command: Command) -> ActionOutcome:
        handler = self._handlers.get(command.verb)
        if handler is None:
            return ActionOutcome(
                verb=command.verb.value,
                status=OutcomeStatus.REJECTED,
                messages=[f"'{command.verb.value}' is not a hacking action."],
            )
        try:
            return handler(world, command)
        except ActionError as exc:
            status = OutcomeStatus.NOT_FOUND if isinstance(exc, TargetNotFound) else OutcomeStatus.BLOCKED
            _logger.debug("Command %s refused: %s", command.verb.value, exc)
            return ActionOutcome(
                verb=command.verb.value,
                status=status,
                messages=[str(exc)],
                target=command.arg(0),
                system_address=world.player.current_system,
            )

    # -- shared mutation helpers ---------------------------------------------------

    def _roll(self, outcome: ActionOutcome, base: float, skill: int = 0, penalty: float = 0.0, *, weight: float = 1.0) -> Roll:
        roll = self.roller.check(base, skill, penalty, weight=weight)
        outcome.chance = roll.chance
        return roll

    @staticmethod
    def _experience(world: WorldState, outcome: ActionOutcome, amount: int) -> None:
        world.player.experience += int(amount)
        outcome.experience_delta += int(amount)

    @staticmethod
    def _stress(world: WorldState, outcome: ActionOutcome, amount: int) -> None:
        outcome.stress_delta += world.player.add_stress(int(amount))

    @staticmethod
    def _skill(world: WorldState, outcome: ActionOutcome, skill: str, amount: int, *, cap: int | None = None) -> None:
        before = world.player.skill(skill)
        after = world.player.raise_skill(skill, amount, cap=cap)
        if after != before:
            outcome.skill_deltas[skill] = outcome.skill_deltas.get(skill, 0) + (after - before)

    @staticmethod
    def _item(world: WorldState, outcome: ActionOutcome, item: str) -> None:
        if item not in world.player.inventory:
            world.player.inventory.append(item)
            outcome.items_gained.append(item)

    @staticmethod
    def _standing(outcome: ActionOutcome, faction_id: str, delta: int) -> None:
        if delta:
            outcome.standing_deltas[faction_id] = outcome.standing_deltas.get(faction_id, 0) + int(delta)

    def _detected(self, world: WorldState, outcome: ActionOutcome, system: System, stress: int) -> None:
        self._stress(world, outcome, stress)
        outcome.detected = True
        outcome.messages.append("Intrusion detection flagged your activity.")
        if self.event_bus is not None:
            self.event_bus.publish(
                IntrusionDetected(
                    system_address=system.address,
                    verb=outcome.verb,
                    stress_delta=int(stress),
                    turn=int(world.turn),
                )
            )

    @staticmethod
    def _outcome(command: Command, status: OutcomeStatus, message: str, **fields) -> ActionOutcome:
        return ActionOutcome(verb=command.verb.value, status=status, messages=[message], **fields)

    # -- guards ---------------------------------------------------------------------

    @staticmethod
    def _connected(world: WorldState) -> tuple[Network, System]:
        found = world.connected_system()
        if found is None:
            raise ActionBlocked("Not connected to any system. Use connect <host> first.")
        return found

    def _compromised(self, world: WorldState) -> tuple[Network, System]:
        network, system = self._connected(world)
        if not system.is_compromised:
            raise ActionBlocked(f"{system.address} is not compromised yet. Exploit it first.")
        return network, system

    def _admin(self, world: WorldState) -> tuple[Network, System]:
        network, system = self._connected(world)
        if not system.admin_access:
            raise ActionBlocked(f"Administrator access to {system.address} is required.")
        return network, system

    @staticmethod
    def _file(system: System, name: str) -> File:
        found = system.files.get(name)
        if found is None:
            raise TargetNotFound(f"File {name} not found on {system.address}.")
        return found

    @staticmethod
    def _scoped(network: Network, system: System) -> dict:
        return {"system_address": system.address, "network_address": network.address}

    # -- discovery ------------------------------------------------------------------

    def scan(self, world: WorldState, command: Command) -> ActionOutcome:
        address_range = command.require(0)
        discovered = self.hosts.discover(world_seed=world.seed, address_range=address_range)
        network = world.networks.get(discovered.address)
        if network is None:
            network = discovered
            world.networks[network.address] = network
            new_hosts = list(network.systems)
        else:
            new_hosts = [address for address in discovered.systems if address not in network.systems]
            for address in new_hosts:
                network.systems[address] = discovered.systems[address]

        outcome = self._outcome(
            command,
            OutcomeStatus.SUCCESS,
            f"Scanning {address_range}...",
            target=address_range,
            network_address=network.address,
        )
        if not network.systems:
            outcome.messages.append("No hosts responded.")
        for system in network.systems.values():
            marker = "new" if system.address in new_hosts else "known"
            outcome.messages.append(
                f"{system.address:<22} {system.os:<15} security {system.security_level}  [{marker}]"
            )
        self._experience(world, outcome, bt.SCAN_XP)
        return outcome

    def nmap(self, world: WorldState, command: Command) -> ActionOutcome:
        host = command.require(0)
        found = world.find_system(host)
        if found is None:
            raise TargetNotFound(f"Host {host} has not been discovered. Scan its network first.")
        network, system = found
        system.nmap_scanned = True
        outcome = self._outcome(
            command,
            OutcomeStatus.SUCCESS,
            f"Port scan of {host} ({system.os}), firewall {network.firewall_strength}:",
            target=host,
            **self._scoped(network, system),
        )
        for service in system.services:
            state = "open" if service.running else "closed"
            flag = "  VULNERABLE" if service.vulnerable else ""
            outcome.messages.append(f"{service.port:>5}/tcp {state:<6} {service.name} {service.version}{flag}")
        if not system.services:
            outcome.messages.append("All scanned ports are filtered.")
        for vulnerability in system.vulnerabilities:
            outcome.messages.append(f"vuln: {vulnerability.name} (severity {vulnerability.severity})")
        self._experience(world, outcome, bt.NMAP_XP)
        return outcome

    # -- connection -----------------------------------------------------------------

    def connect(self, world: WorldState, command: Command) -> ActionOutcome:
        host = command.require(0)
        if world.player.current_system is not None:
            raise ActionBlocked(f"Already connected to {world.player.current_system}. Disconnect first.")
        found = world.find_system(host)
        if found is None:
            raise TargetNotFound(f"Unknown host {host}. Scan its network first.")
        network, system = found
        if system.lockout_until_turn > world.turn:
            waiting = system.lockout_until_turn - world.turn
            raise ActionBlocked(f"{host} is refusing connections for {waiting} more turn(s).")

        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Connecting to {host}...", target=host, **self._scoped(network, system))
        roll = self.roller.roll(connect_chance(network, system))
        outcome.chance = roll.chance
        if roll.success:
            system.advance_to(CompromiseStage.CONNECTED)
            world.player.current_system = host
            world.player.current_location = f"{host}:/home/user"
            outcome.messages.append(f"Connected to {host}.")
            self._experience(world, outcome, bt.CONNECT_XP)
            return outcome

        _fail(outcome, "Connection refused by the firewall.")
        if detection_active(network, system):
            self._detected(world, outcome, system, bt.CONNECT_DETECTED_STRESS)
            system.lockout_until_turn = world.turn + bt.CONNECT_LOCKOUT_TURNS
        return outcome

    def disconnect(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        world.player.current_system = None
        world.player.current_location = LOCAL_TERMINAL
        return self._outcome(command, OutcomeStatus.SUCCESS, f"Disconnected from {system.address}.", **self._scoped(network, system))

    # -- file system ----------------------------------------------------------------

    def ls(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Listing {world.player.current_location}", **self._scoped(network, system))
        for item in system.files.values():
            lock = " [encrypted]" if item.encrypted else ""
            outcome.messages.append(f"{item.permissions}  {item.size_kb:>6}KB  {item.name}{lock}")
        if not system.files:
            outcome.messages.append("(empty)")
        return outcome

    def pwd(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        return self._outcome(command, OutcomeStatus.SUCCESS, world.player.current_location, **self._scoped(network, system))

    def cd(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        directory = command.require(0)
        _, _, current = world.player.current_location.partition(":")
        parts = [] if directory.startswith("/") else [part for part in current.split("/") if part]
        for part in directory.split("/"):
            if part in {"", "."}:
                continue
            if part == "..":
                if parts:
                    parts.pop()
                continue
            parts.append(part)
        world.player.current_location = f"{system.address}:/{'/'.join(parts)}"
        return self._outcome(command, OutcomeStatus.SUCCESS, world.player.current_location, target=directory, **self._scoped(network, system))

    def cat(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        item = self._file(system, name)
        if item.encrypted:
            raise ActionBlocked(f"{name} is encrypted. Use crack or decrypt first.")
        return self._outcome(command, OutcomeStatus.SUCCESS, item.content or "(empty file)", target=name, **self._scoped(network, system))

    def download(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        item = self._file(system, name)
        if item.encrypted:
            raise ActionBlocked(f"{name} is encrypted and cannot be exfiltrated.")
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Downloaded {name} ({item.size_kb}KB).", target=name, **self._scoped(network, system))
        self._item(world, outcome, f"{name} ({item.size_kb}KB)")
        self._experience(world, outcome, bt.DOWNLOAD_XP)
        if detection_active(network, system) and self.roller.roll(bt.DOWNLOAD_DETECTION_CHANCE).success:
            self._detected(world, outcome, system, bt.DOWNLOAD_DETECTED_STRESS)
        return outcome

    def upload(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        item = world.player.find_item(name)
        if item is None:
            raise TargetNotFound(f"{name} is not in your inventory.")
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Uploading {name} to {system.address}...", target=name, **self._scoped(network, system))
        if self._roll(outcome, bt.UPLOAD_CHANCE).success:
            system.files.setdefault(name, File(name=name, content=f"Uploaded payload: {item}"))
            outcome.messages.append("Upload complete.")
            self._experience(world, outcome, bt.UPLOAD_XP)
            return outcome
        _fail(outcome, "Transfer was interrupted.")
        self._stress(world, outcome, bt.UPLOAD_FAILED_STRESS)
        return outcome

    # -- compromise ladder ----------------------------------------------------------

    def exploit(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        vulnerability = system.find_vulnerability(name)
        if vulnerability is None:
            raise TargetNotFound(f"No vulnerability matching {name} on {system.address}.")
        outcome = self._outcome(
            command,
            OutcomeStatus.SUCCESS,
            f"Exploiting {vulnerability.name} on {system.address}...",
            target=vulnerability.name,
            **self._scoped(network, system),
        )
        roll = self.roller.roll(exploit_chance(world.player.skill("Hacking"), vulnerability.severity))
        outcome.chance = roll.chance
        if not roll.success:
            _fail(outcome, "The exploit crashed the target process.")
            if detection_active(network, system):
                self._detected(world, outcome, system, bt.EXPLOIT_DETECTED_STRESS)
            return outcome

        system.advance_to(CompromiseStage.COMPROMISED)
        if vulnerability.severity >= bt.EXPLOIT_ADMIN_SEVERITY:
            system.advance_to(CompromiseStage.ADMIN_ACCESS)
            outcome.messages.append("Root shell obtained. Administrator access granted.")
            self._experience(world, outcome, bt.EXPLOIT_ADMIN_XP)
        else:
            outcome.messages.append("User-level shell obtained. System compromised.")
            self._experience(world, outcome, bt.EXPLOIT_XP)
        self._skill(world, outcome, "Hacking", bt.EXPLOIT_SKILL_GAIN)
        return outcome

    def _encrypted_file(self, world: WorldState, command: Command) -> tuple[Network, System, File]:
        network, system = self._connected(world)
        item = self._file(system, command.require(0))
        if not item.encrypted:
            raise ActionBlocked(f"{item.name} is not encrypted.")
        return network, system, item

    def crack(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system, item = self._encrypted_file(world, command)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Brute forcing {item.name}...", target=item.name, **self._scoped(network, system))
        if self._roll(outcome, bt.CRACK_BASE, world.player.skill("Cryptography")).success:
            self._unlock_file(world, outcome, item)
            self._experience(world, outcome, bt.CRACK_XP)
            self._skill(world, outcome, "Cryptography", bt.CRACK_SKILL_GAIN)
            return outcome
        _fail(outcome, "Password space exhausted without a hit.")
        self._stress(world, outcome, bt.CRACK_FAILED_STRESS)
        return outcome

    def decrypt(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system, item = self._encrypted_file(world, command)
        key = command.arg(1)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Decrypting {item.name}...", target=item.name, **self._scoped(network, system))
        if key is not None:
            outcome.chance = 1.0 if item.password is not None and key == item.password else 0.0
            succeeded = outcome.chance == 1.0
        else:
            succeeded = self._roll(outcome, bt.DECRYPT_BASE, world.player.skill("Cryptography")).success
        if succeeded:
            self._unlock_file(world, outcome, item)
            self._experience(world, outcome, bt.DECRYPT_XP)
            return outcome
        if key is not None:
            _fail(outcome, "Wrong key.")
            return outcome
        _fail(outcome, "Cipher resisted analysis.")
        self._stress(world, outcome, bt.DECRYPT_FAILED_STRESS)
        return outcome

    @staticmethod
    def _unlock_file(world: WorldState, outcome: ActionOutcome, item: File) -> None:
        item.encrypted = False
        outcome.messages.append(f"{item.name} decrypted:")
        outcome.messages.append(item.content or "(empty file)")
        lowered = f"{item.name} {item.content}".lower()
        for marker, flag in STORY_FILE_FLAGS:
            if marker in lowered:
                world.story_flags[flag] = True

    def backdoor(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._compromised(world)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Planting backdoor on {system.address}...", **self._scoped(network, system))
        if self._roll(outcome, bt.BACKDOOR_BASE, world.player.skill("Hacking")).success:
            system.backdoor_installed = True
            outcome.messages.append("Backdoor installed. You can reconnect at will.")
            self._item(world, outcome, f"Backdoor to {system.address}")
            self._experience(world, outcome, bt.BACKDOOR_XP)
            self._skill(world, outcome, "Hacking", bt.BACKDOOR_SKILL_GAIN)
            return outcome
        _fail(outcome, "The implant was rejected by integrity checks.")
        if detection_active(network, system):
            self._detected(world, outcome, system, bt.BACKDOOR_DETECTED_STRESS)
        return outcome

    def rootkit(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._admin(world)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Installing rootkit on {system.address}...", **self._scoped(network, system))
        if not self._roll(outcome, bt.ROOTKIT_BASE, world.player.skill("Hacking")).success:
            _fail(outcome, "Kernel module failed to load.")
            self._stress(world, outcome, bt.ROOTKIT_FAILED_STRESS)
            return outcome
        system.advance_to(CompromiseStage.ROOTKIT_HIDDEN)
        network.intrusion_detection = False
        system.intrusion_detection = False
        outcome.messages.append("Rootkit active. Intrusion detection on this network is blind.")
        self._item(world, outcome, f"Rootkit on {system.address}")
        self._experience(world, outcome, bt.ROOTKIT_XP)
        self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, bt.ROOTKIT_STANDING)
        self._skill(world, outcome, "Hacking", bt.ROOTKIT_HACKING_GAIN)
        self._skill(world, outcome, "Anonymity", bt.ROOTKIT_ANONYMITY_GAIN)
        return outcome

    # -- anonymity ------------------------------------------------------------------

    def trace(self, world: WorldState, command: Command) -> ActionOutcome:
        host = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Tracing route to {host}...", target=host)
        for hop in range(1, 4):
            outcome.messages.append(f"{hop}  10.{hop}.0.1")
        outcome.messages.append(f"4  {host}")
        if world.player.skill("Anonymity") > bt.TRACE_SAFE_ANONYMITY:
            outcome.messages.append("Your own route stayed masked.")
        else:
            outcome.messages.append("The probe exposed your origin.")
            self._stress(world, outcome, bt.TRACE_EXPOSED_STRESS)
        self._experience(world, outcome, bt.TRACE_XP)
        return outcome

    def _anonymize(
        self,
        world: WorldState,
        outcome: ActionOutcome,
        *,
        chance: float,
        anonymity: int,
        relief: int,
        xp: int,
        success_message: str,
        failure_message: str,
    ) -> ActionOutcome:
        if self._roll(outcome, chance).success:
            outcome.messages.append(success_message)
            self._skill(world, outcome, "Anonymity", anonymity, cap=ANONYMITY_CAP)
            self._stress(world, outcome, -relief)
            self._experience(world, outcome, xp)
        else:
            _fail(outcome, failure_message)
        return outcome

    def proxy(self, world: WorldState, command: Command) -> ActionOutcome:
        host = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Routing through proxy {host}...", target=host)
        return self._anonymize(
            world,
            outcome,
            chance=bt.PROXY_CHANCE,
            anonymity=bt.PROXY_ANONYMITY_GAIN,
            relief=bt.PROXY_STRESS_RELIEF,
            xp=bt.PROXY_XP,
            success_message="Proxy chain established.",
            failure_message="The proxy dropped the connection.",
        )

    def tor(self, world: WorldState, command: Command) -> ActionOutcome:
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, "Bootstrapping Tor circuit...")
        return self._anonymize(
            world,
            outcome,
            chance=bt.TOR_CHANCE,
            anonymity=bt.TOR_ANONYMITY_GAIN,
            relief=bt.TOR_STRESS_RELIEF,
            xp=bt.TOR_XP,
            success_message="Circuit built. Traffic is onion routed.",
            failure_message="No usable relays were reachable.",
        )

    def vpn(self, world: WorldState, command: Command) -> ActionOutcome:
        server = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Opening VPN tunnel to {server}...", target=server)
        return self._anonymize(
            world,
            outcome,
            chance=bt.VPN_CHANCE,
            anonymity=bt.VPN_ANONYMITY_GAIN,
            relief=bt.VPN_STRESS_RELIEF,
            xp=bt.VPN_XP,
            success_message="Tunnel up.",
            failure_message="Handshake timed out.",
        )

    # -- remote operations ----------------------------------------------------------

    def social(self, world: WorldState, command: Command) -> ActionOutcome:
        target = command.rest() or command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Working an angle on {target}...", target=target)
        roll = self._roll(outcome, bt.SOCIAL_BASE, world.player.skill("Social Engineering"), weight=bt.SOCIAL_WEIGHT)
        if roll.success:
            outcome.messages.append(f"{target} shared more than they should have.")
            self._item(world, outcome, f"Social Info: {target}")
            self._experience(world, outcome, bt.SOCIAL_XP)
            self._skill(world, outcome, "Social Engineering", bt.SOCIAL_SKILL_GAIN)
            return outcome
        _fail(outcome, f"{target} grew suspicious and hung up.")
        self._stress(world, outcome, bt.SOCIAL_FAILED_STRESS)
        return outcome

    def ddos(self, world: WorldState, command: Command) -> ActionOutcome:
        target = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Flooding {target}...", target=target)
        roll = self._roll(outcome, bt.DDOS_BASE, world.player.skill("Network Security"), weight=bt.DDOS_WEIGHT)
        if roll.success:
            outcome.messages.append(f"{target} is offline.")
            self._experience(world, outcome, bt.DDOS_XP)
            self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, bt.DDOS_STANDING)
            self._skill(world, outcome, "Network Security", bt.DDOS_SKILL_GAIN)
            self._stress(world, outcome, bt.DDOS_STRESS)
            return outcome
        _fail(outcome, f"{target} absorbed the flood.")
        self._stress(world, outcome, bt.DDOS_FAILED_STRESS)
        return outcome

    def mitm(self, world: WorldState, command: Command) -> ActionOutcome:
        first = command.require(0)
        second = command.require(1)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Intercepting {first} <-> {second}...", target=first)
        skill = (world.player.skill("Network Security") + world.player.skill("Cryptography")) // 2
        if self._roll(outcome, bt.MITM_BASE, skill, weight=bt.MITM_WEIGHT).success:
            outcome.messages.append("Session traffic captured.")
            self._item(world, outcome, f"MITM Data: {first} <-> {second}")
            self._experience(world, outcome, bt.MITM_XP)
            self._skill(world, outcome, "Network Security", bt.MITM_NETSEC_GAIN)
            self._skill(world, outcome, "Cryptography", bt.MITM_CRYPTO_GAIN)
            return outcome
        _fail(outcome, "Certificate pinning broke the interception.")
        self._stress(world, outcome, bt.MITM_FAILED_STRESS)
        if self.roller.roll(bt.MITM_EXPOSURE_CHANCE).success:
            outcome.detected = True
            outcome.messages.append("Both endpoints logged your spoofed address.")
            self._stress(world, outcome, bt.MITM_EXPOSURE_STRESS)
        return outcome

    # -- surveillance ---------------------------------------------------------------

    def _surveil(
        self,
        world: WorldState,
        command: Command,
        *,
        admin: bool,
        chance: float,
        xp: int,
        start: str,
        success: str,
        failure: str,
        failed_stress: int = 0,
        failed_standing: int = 0,
        item: str | None = None,
    ) -> ActionOutcome:
        network, system = self._admin(world) if admin else self._compromised(world)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, start.format(address=system.address), **self._scoped(network, system))
        if self._roll(outcome, chance).success:
            outcome.messages.append(success)
            if item:
                self._item(world, outcome, item.format(address=system.address))
            self._experience(world, outcome, xp)
            return outcome
        _fail(outcome, failure)
        if failed_stress:
            self._stress(world, outcome, failed_stress)
        self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, failed_standing)
        return outcome

    def keylog(self, world: WorldState, command: Command) -> ActionOutcome:
        return self._surveil(
            world,
            command,
            admin=False,
            chance=bt.KEYLOG_CHANCE,
            xp=bt.KEYLOG_XP,
            start="Hooking keyboard input on {address}...",
            success="Keystrokes are streaming back.",
            failure="Endpoint protection quarantined the hook.",
            failed_stress=bt.KEYLOG_FAILED_STRESS,
            item="Keylogger on {address}",
        )

    def screen(self, world: WorldState, command: Command) -> ActionOutcome:
        return self._surveil(
            world,
            command,
            admin=False,
            chance=bt.SCREEN_CHANCE,
            xp=bt.SCREEN_XP,
            start="Capturing the display of {address}...",
            success="Screenshot captured.",
            failure="The session was locked.",
        )

    def webcam(self, world: WorldState, command: Command) -> ActionOutcome:
        return self._surveil(
            world,
            command,
            admin=True,
            chance=bt.WEBCAM_CHANCE,
            xp=bt.WEBCAM_XP,
            start="Activating camera on {address}...",
            success="Video feed acquired.",
            failure="The indicator light gave you away.",
            failed_stress=bt.WEBCAM_FAILED_STRESS,
            failed_standing=bt.WEBCAM_FAILED_STANDING,
        )

    def mic(self, world: WorldState, command: Command) -> ActionOutcome:
        return self._surveil(
            world,
            command,
            admin=True,
            chance=bt.MIC_CHANCE,
            xp=bt.MIC_XP,
            start="Opening microphone on {address}...",
            success="Audio is being recorded.",
            failure="The audio driver refused the capture.",
            failed_stress=bt.MIC_FAILED_STRESS,
        )

    def mail(self, world: WorldState, command: Command) -> ActionOutcome:
        return self._surveil(
            world,
            command,
            admin=False,
            chance=bt.MAIL_CHANCE,
            xp=bt.MAIL_XP,
            start="Reading mail spool on {address}...",
            success="Mailbox dumped.",
            failure="The mailbox is stored encrypted at rest.",
        )

    def db(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._compromised(world)
        query = command.rest() or command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"db> {query}", target=query, **self._scoped(network, system))
        if self._roll(outcome, bt.DB_CHANCE).success:
            outcome.messages.append("3 rows returned.")
            self._experience(world, outcome, bt.DB_XP)
            self._skill(world, outcome, "Programming", bt.DB_SKILL_GAIN)
            return outcome
        _fail(outcome, "Query rejected: insufficient privileges.")
        return outcome

    def log(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._compromised(world)
        service = command.arg(0) or "system"
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Reviewing {service} logs on {system.address}.", target=service, **self._scoped(network, system))
        outcome.messages.append("Your entries have been scrubbed.")
        self._experience(world, outcome, bt.LOG_XP)
        self._skill(world, outcome, "Forensics", bt.LOG_SKILL_GAIN)
        return outcome

    # -- processes ------------------------------------------------------------------

    def ps(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, "  PID  USER       COMMAND", **self._scoped(network, system))
        for process in sorted(system.processes.values(), key=lambda row: row.pid):
            outcome.messages.append(f"{process.pid:>5}  {process.user:<10} {process.name}")
        self._experience(world, outcome, bt.PS_XP)
        return outcome

    def kill(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._admin(world)
        raw_pid = command.require(0)
        try:
            pid = int(raw_pid)
        except ValueError:
            raise ActionBlocked(f"PID must be a number, got {raw_pid}.") from None
        process = system.processes.get(pid)
        if process is None:
            raise TargetNotFound(f"No process with PID {pid} on {system.address}.")
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Sending SIGKILL to {pid} ({process.name})...", target=str(pid), **self._scoped(network, system))
        if not self._roll(outcome, bt.KILL_BASE, world.player.skill("Hacking")).success:
            _fail(outcome, f"{process.name} is protected by a watchdog.")
            self._stress(world, outcome, bt.KILL_FAILED_STRESS)
            return outcome

        del system.processes[pid]
        outcome.messages.append(f"{process.name} terminated.")
        bonus = bt.KILL_PROCESS_BONUSES.get(process.name)
        if bonus is None:
            self._experience(world, outcome, bt.KILL_DEFAULT_XP)
            return outcome
        self._experience(world, outcome, int(bonus["xp"]))
        self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, int(bonus["standing"]))
        if bonus["flag"]:
            world.story_flags[str(bonus["flag"])] = True
        if process.name == "intrusion_detector":
            system.intrusion_detection = False
            outcome.messages.append("Host-level intrusion detection disabled.")
        elif process.name == "firewall_daemon":
            system.firewall_strength = 0
            outcome.messages.append("Host firewall is down.")
        return outcome

    # -- storage --------------------------------------------------------------------

    def mount(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        device = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Mounting {device}...", target=device, **self._scoped(network, system))
        if self._roll(outcome, bt.MOUNT_CHANCE).success:
            if device not in system.mounted_devices:
                system.mounted_devices.append(device)
            outcome.messages.append(f"{device} mounted at /mnt/{device.strip('/').replace('/', '_')}.")
            self._experience(world, outcome, bt.MOUNT_XP)
            return outcome
        _fail(outcome, f"{device} has an unreadable superblock.")
        return outcome

    def format(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        device = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Formatting {device}...", target=device, **self._scoped(network, system))
        if not self._roll(outcome, bt.FORMAT_CHANCE).success:
            _fail(outcome, f"{device} is write protected.")
            return outcome
        if device in system.mounted_devices:
            system.mounted_devices.remove(device)
        outcome.messages.append(f"{device} formatted.")
        if any(marker in device.lower() for marker in bt.FORMAT_SENSITIVE_MARKERS):
            outcome.messages.append("Destroying backups and evidence did not go unnoticed.")
            self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, bt.FORMAT_EVIDENCE_STANDING)
        self._experience(world, outcome, bt.FORMAT_XP)
        return outcome

    def wipe(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        item = self._file(system, command.require(0))
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Shredding {item.name}...", target=item.name, **self._scoped(network, system))
        if not self._roll(outcome, bt.WIPE_CHANCE).success:
            _fail(outcome, f"{item.name} is locked by another process.")
            return outcome
        system.wiped_files[item.name] = system.files.pop(item.name)
        outcome.messages.append(f"{item.name} wiped.")
        if any(marker in item.name.lower() for marker in bt.WIPE_SENSITIVE_MARKERS):
            self._experience(world, outcome, bt.WIPE_SENSITIVE_XP)
            self._standing(outcome, bt.HACKER_COMMUNITY_FACTION, bt.WIPE_SENSITIVE_STANDING)
        else:
            self._experience(world, outcome, bt.WIPE_XP)
        return outcome

    def recover(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Carving free blocks for {name}...", target=name, **self._scoped(network, system))
        roll = self._roll(outcome, bt.RECOVER_BASE, world.player.skill("Forensics"), weight=bt.RECOVER_WEIGHT)
        if not roll.success:
            _fail(outcome, "Nothing recoverable remained.")
            self._stress(world, outcome, bt.RECOVER_FAILED_STRESS)
            return outcome
        restored = system.wiped_files.pop(name, None)
        if restored is not None:
            system.files[name] = restored
            outcome.messages.append(f"{name} restored.")
        else:
            self._item(world, outcome, f"Recovered fragment: {name}")
            outcome.messages.append("Partial fragments recovered.")
        self._skill(world, outcome, "Forensics", bt.RECOVER_SKILL_GAIN)
        return outcome

    # -- analysis -------------------------------------------------------------------

    def analyze(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        item = self._file(system, command.require(0))
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Analyzing {item.name}: {item.size_kb}KB, {'encrypted' if item.encrypted else 'plain'}.", target=item.name, **self._scoped(network, system))
        if self._roll(outcome, bt.ANALYZE_HIDDEN_CHANCE).success:
            outcome.messages.append("Steganographic payload found.")
            self._item(world, outcome, f"Hidden data: {item.name}")
        else:
            outcome.messages.append("No hidden data found.")
        self._experience(world, outcome, bt.ANALYZE_XP)
        self._skill(world, outcome, "Forensics", bt.ANALYZE_SKILL_GAIN)
        return outcome

    def disasm(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        item = self._file(system, command.require(0))
        if not item.name.lower().endswith(bt.DISASM_EXTENSIONS):
            raise ActionBlocked(f"{item.name} is not a binary ({', '.join(bt.DISASM_EXTENSIONS)}).")
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Disassembling {item.name}...", target=item.name, **self._scoped(network, system))
        if self._roll(outcome, bt.DISASM_CHANCE).success:
            outcome.messages.append("Unchecked memcpy found in the update handler.")
            self._item(world, outcome, f"Vulnerability notes: {item.name}")
            self._experience(world, outcome, bt.DISASM_XP)
            self._skill(world, outcome, "Reverse Engineering", bt.DISASM_SKILL_GAIN)
            return outcome
        _fail(outcome, "The binary is packed and obfuscated.")
        return outcome

    def debug(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        item = self._file(system, command.require(0))
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Attaching debugger to {item.name}...", target=item.name, **self._scoped(network, system))
        if self._roll(outcome, bt.DEBUG_CHANCE).success:
            outcome.messages.append("Breakpoint hit. Execution trace captured.")
            self._item(world, outcome, f"Debug trace: {item.name}")
            self._experience(world, outcome, bt.DEBUG_XP)
            self._skill(world, outcome, "Reverse Engineering", bt.DEBUG_REVENG_GAIN)
            self._skill(world, outcome, "Programming", bt.DEBUG_PROGRAMMING_GAIN)
            return outcome
        _fail(outcome, "Anti-debugging checks killed the process.")
        return outcome

    def compile(self, world: WorldState, command: Command) -> ActionOutcome:
        self._connected(world)
        name = command.require(0)
        if not name.lower().endswith(bt.COMPILE_EXTENSIONS):
            raise ActionBlocked(f"{name} is not a source file.")
        stem = name.rsplit(".", 1)[0]
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Compiling {name}...", target=name, system_address=world.player.current_system)
        roll = self._roll(outcome, bt.COMPILE_BASE, world.player.skill("Programming"), weight=bt.COMPILE_WEIGHT)
        if roll.success:
            outcome.messages.append(f"Built {stem}.")
            self._item(world, outcome, f"Compiled: {stem}")
            self._experience(world, outcome, bt.COMPILE_XP)
            self._skill(world, outcome, "Programming", bt.COMPILE_SKILL_GAIN)
            return outcome
        _fail(outcome, "Compilation failed with 12 errors.")
        self._stress(world, outcome, bt.COMPILE_FAILED_STRESS)
        return outcome

    def run(self, world: WorldState, command: Command) -> ActionOutcome:
        network, system = self._connected(world)
        name = command.require(0)
        if name not in system.files and not world.player.has_item(name):
            raise TargetNotFound(f"{name} is neither on {system.address} nor in your inventory.")
        chance, xp = bt.RUN_DEFAULT_CHANCE, bt.RUN_DEFAULT_XP
        for marker, profile_chance, profile_xp in bt.RUN_PROFILES:
            if marker in name.lower():
                chance, xp = profile_chance, profile_xp
                break
        outcome = self._outcome(command, OutcomeStatus.SUCCESS, f"Executing {name}...", target=name, **self._scoped(network, system))
        if self._roll(outcome, chance).success:
            outcome.messages.append(f"{name} exited with status 0.")
            self._experience(world, outcome, xp)
            return outcome
        _fail(outcome, f"{name} segfaulted.")
        return outcome


def _fail(outcome: ActionOutcome, message: str) -> None:
    outcome.mark(OutcomeStatus.FAILED)
    outcome.messages.append(message)
