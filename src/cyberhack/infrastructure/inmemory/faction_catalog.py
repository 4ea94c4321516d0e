from __future__ import annotations

from typing import Dict

from cyberhack.domain.models.faction import Faction


INITIAL_STANDINGS: Dict[str, int] = {
    "CyberFreedom": 50,
    "NEXUS": -100,
    "GovernmentCoalition": 0,
    "UndergroundHackers": 25,
    "CorporateSecurity": -50,
}


def default_factions() -> Dict[str, Faction]:
    rows = (
        Faction(
            id="CyberFreedom",
            name="Cyber Freedom",
            power_level=65,
            allies=["UndergroundHackers", "AcademicConsortium"],
            enemies=["NEXUS", "GovernmentCoalition", "CorporateSecurity"],
            description="Digital rights activists fighting corporate surveillance.",
            services=["Safe house network", "Encrypted comms", "Legal defense fund", "Exploit archive"],
        ),
        Faction(
            id="NEXUS",
            name="NEXUS Corporation",
            power_level=95,
            allies=["CorporateSecurity", "MilitaryCyberCommand"],
            enemies=["CyberFreedom", "UndergroundHackers", "EnvironmentalActivists"],
            description="The megacorporation behind Project Apocalypse.",
            services=["Contractor badge", "Internal VPN access", "Datacenter floor plans", "Executive override codes"],
        ),
        Faction(
            id="GovernmentCoalition",
            name="Government Coalition",
            power_level=80,
            allies=["MilitaryCyberCommand", "InternationalAlliance"],
            enemies=["NEXUS", "CriminalSyndicates", "UndergroundHackers"],
            description="Allied intelligence agencies with competing agendas.",
            services=["Immunity deal", "Classified briefings", "Witness protection", "Agency backdoors"],
        ),
        Faction(
            id="UndergroundHackers",
            name="Underground Hackers",
            power_level=55,
            allies=["CyberFreedom", "CriminalSyndicates"],
            enemies=["CorporateSecurity", "GovernmentCoalition"],
            description="The loose hacker community whose respect is your reputation.",
            services=["Zero-day market", "Botnet rental", "Crew for hire", "Private forums"],
        ),
        Faction(
            id="CorporateSecurity",
            name="Corporate Security",
            power_level=70,
            allies=["NEXUS", "MilitaryCyberCommand"],
            enemies=["UndergroundHackers", "CyberFreedom", "CriminalSyndicates"],
            description="Private threat hunters on corporate retainers.",
            services=["Threat intel feed", "Incident reports", "Honeypot maps", "Red team contracts"],
        ),
        Faction(
            id="InternationalAlliance",
            name="International Alliance",
            power_level=75,
            allies=["GovernmentCoalition", "AcademicConsortium"],
            enemies=["CriminalSyndicates", "NEXUS"],
            description="Treaty bodies coordinating cross-border cyber policy.",
            services=["Diplomatic channel", "Extradition shield", "Observer status"],
        ),
        Faction(
            id="AcademicConsortium",
            name="Academic Consortium",
            power_level=60,
            allies=["CyberFreedom", "InternationalAlliance"],
            enemies=["NEXUS"],
            description="Universities and labs publishing security research.",
            services=["Research library", "Lab compute", "Peer review of exploits"],
        ),
        Faction(
            id="ReligiousTechOrder",
            name="Religious Tech Order",
            power_level=45,
            allies=["AcademicConsortium"],
            enemies=["CriminalSyndicates"],
            description="A techno-monastic order guarding digital relics.",
            services=["Sanctuary", "Archive of relics"],
        ),
        Faction(
            id="CriminalSyndicates",
            name="Criminal Syndicates",
            power_level=65,
            allies=["UndergroundHackers"],
            enemies=["GovernmentCoalition", "CorporateSecurity", "InternationalAlliance"],
            description="Organized crime moving money through compromised networks.",
            services=["Money laundering", "Forged identities", "Muscle"],
        ),
        Faction(
            id="MilitaryCyberCommand",
            name="Military Cyber Command",
            power_level=85,
            allies=["GovernmentCoalition", "NEXUS", "CorporateSecurity"],
            enemies=["CriminalSyndicates", "UndergroundHackers"],
            description="Offensive cyber units with deep ties to NEXUS contracts.",
            services=["Signals intercepts", "Cyber range access", "Weapons-grade tooling"],
        ),
        Faction(
            id="EnvironmentalActivists",
            name="Environmental Activists",
            power_level=50,
            allies=["AcademicConsortium", "CyberFreedom"],
            enemies=["NEXUS", "CorporateSecurity"],
            description="Activists tracking NEXUS's environmental crimes.",
            services=["Field informants", "Protest cover"],
        ),
        Faction(
            id="TranshumanistMovement",
            name="Transhumanist Movement",
            power_level=55,
            allies=["NEXUS", "AcademicConsortium"],
            enemies=["ReligiousTechOrder", "EnvironmentalActivists"],
            description="Augmentation enthusiasts funded by NEXUS grants.",
            services=["Neural implants", "Biohacker clinics"],
        ),
        Faction(
            id="DigitalPreservationSociety",
            name="Digital Preservation Society",
            power_level=40,
            allies=["AcademicConsortium", "InternationalAlliance"],
            enemies=["CriminalSyndicates"],
            description="Archivists mirroring data the powerful want erased.",
            services=["Mirror network", "Dead man's switch"],
        ),
        Faction(
            id="QuantumResearchInstitute",
            name="Quantum Research Institute",
            power_level=70,
            allies=["AcademicConsortium", "NEXUS"],
            enemies=["CriminalSyndicates"],
            description="Cryptography researchers racing to break classical ciphers.",
            services=["Quantum cryptanalysis", "Post-quantum keys"],
        ),
        Faction(
            id="AIRightsAdvocacy",
            name="AI Rights Advocacy",
            power_level=45,
            allies=["CyberFreedom", "AcademicConsortium"],
            enemies=["CorporateSecurity", "MilitaryCyberCommand"],
            description="Campaigners for the rights of autonomous systems.",
            services=["Model whistleblowers", "Policy briefings"],
        ),
    )
    return {faction.id: faction for faction in rows}
