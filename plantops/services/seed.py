"""
Synthetic demo records generated at startup.

Builds plausible plants and RTUs from a ``random.Random`` instance so a
fixed ``SEED_RANDOM`` reproduces the same boot data. Nothing in the
service relies on the distributions below; they only make the dashboard
look populated.

CHANGELOG:
- 2026-10-03: Initial creation (STORY-004)

TODO:
- None
"""

import logging
import random
from datetime import UTC, date, datetime, timedelta

from plantops.models.plant import (
    Contract,
    ControlChannel,
    Infra,
    Inverter,
    KpxIdentifier,
    Monitoring,
    Plant,
    PlantStatus,
    PlantType,
)
from plantops.models.rtu import CommunicationProtocol, Rtu, RtuStatus

logger = logging.getLogger(__name__)

REGIONS = [
    "Seoul", "Busan", "Incheon", "Daegu", "Gwangju",
    "Daejeon", "Ulsan", "Gyeonggi", "Gangwon", "Jeju",
]
NAME_PREFIXES = ["Sun", "Wind", "Blue", "Green", "Clear", "Future", "Renew", "Eco", "Bright"]
NAME_SUFFIXES = ["Energy", "Power", "Plant", "Solar", "Light", "Industries", "Flex", "Farm"]
INSTALL_TYPES = ["ground", "floating", "rooftop", "agrivoltaic", None]
MODULE_TYPES = ["mono", "poly", "thin-film", "PERC", "TOPCon", None]
CONTRACT_TYPES = ["spot", "forward", "alternative", "private_ppa", "new_business"]
CONTRACT_DATES = ["1st (24-06)", "2nd (24-07)", "3rd (24-08)", "4th (24-09)", "1st (25-01)"]

HEALTHY_PLANT_STATES = [PlantStatus.NORMAL, PlantStatus.OPERATING]
DEGRADED_PLANT_STATES = [
    PlantStatus.UNDER_INSPECTION,
    PlantStatus.UNDER_REPAIR,
    PlantStatus.FAULTED,
    PlantStatus.STOPPED,
]

MANUFACTURERS = [
    "Siemens", "ABB", "Schneider Electric", "General Electric", "Honeywell",
    "Emerson", "Yokogawa", "Rockwell Automation", "Mitsubishi Electric", "Phoenix Contact",
]
MODEL_PREFIXES = ["RTU", "REM", "CTRL", "XTR", "SYS", "MON"]
MODEL_SUFFIXES = ["1000", "2000", "3000", "PRO", "LITE", "MAX", "PLUS"]
RTU_TYPES = [
    "generation monitoring",
    "environment sensor",
    "integrated control",
    "power quality",
    "security monitoring",
]
RTU_STATUS_WEIGHTS = {
    RtuStatus.ACTIVE: 0.7,
    RtuStatus.INACTIVE: 0.1,
    RtuStatus.MAINTENANCE: 0.1,
    RtuStatus.ERROR: 0.1,
}

PLANT_LINK_RATIO = 0.7
"""Share of generated RTUs linked to a random plant."""


def _maybe(rng: random.Random, probability: float, value):
    return value if rng.random() < probability else None


def _capacity_for(plant_type: PlantType, rng: random.Random) -> int:
    if plant_type is PlantType.SOLAR:
        return rng.randint(500, 5000)
    if plant_type is PlantType.WIND:
        return rng.randint(2000, 8000)
    return rng.randint(1000, 3000)


def generate_plant(plant_id: int, rng: random.Random, now: datetime) -> Plant:
    """Fabricate one plant with the given id."""
    plant_type = rng.choice(list(PlantType))
    states = HEALTHY_PLANT_STATES if rng.random() < 0.7 else DEGRADED_PLANT_STATES
    capacity = _capacity_for(plant_type, rng)
    rtu_id = f"{rng.randint(0, 9999):04d}"
    region = rng.choice(REGIONS)
    install_date = _maybe(
        rng, 0.7, (now - timedelta(days=rng.randint(30, 5 * 365))).date()
    )

    return Plant(
        id=plant_id,
        modified_at=now - timedelta(minutes=rng.randint(0, 60 * 24 * 30)),
        status=rng.choice(states),
        infra=Infra(
            id=plant_id,
            carrier_fk=10000 + plant_id,
            name=f"{rng.choice(NAME_PREFIXES)} {rng.choice(NAME_SUFFIXES)}",
            type=plant_type,
            address=f"{region} {rng.randint(1, 999)}-{rng.randint(1, 99)}",
            latitude=round(rng.uniform(33.0, 38.0), 6),
            longitude=round(rng.uniform(125.0, 130.0), 6),
            altitude=_maybe(rng, 0.6, rng.randint(0, 1000)),
            capacity=capacity,
            install_date=install_date,
            kpx_identifier=KpxIdentifier(
                id=plant_id, kpx_cbp_gen_id=f"{rng.randint(0, 9999):04d}"
            ),
            inverter=[
                Inverter(
                    id=1,
                    capacity=capacity,
                    tilt=rng.randint(0, 45),
                    azimuth=rng.randint(90, 270),
                    install_type=rng.choice(INSTALL_TYPES),
                    module_type=rng.choice(MODULE_TYPES),
                )
            ],
        ),
        monitoring=Monitoring(
            id=200 + plant_id,
            company=rng.randint(1, 5),
            rtu_id=rtu_id,
            resource=plant_id,
        ),
        control=[
            ControlChannel(
                id=50 + plant_id,
                company=rng.randint(1, 5),
                control_type=rng.randint(1, 3),
                controllable_capacity=capacity,
                rtu_id=rtu_id,
                priority=rng.randint(1, 5),
                resource=plant_id,
            )
        ],
        contract=Contract(
            id=plant_id,
            modified_at=now - timedelta(days=rng.randint(0, 30)),
            resource=plant_id,
            contract_type=rng.choice(CONTRACT_TYPES),
            contract_date=rng.choice(CONTRACT_DATES),
            weight=round(rng.uniform(1.0, 1.2), 3),
            fixed_contract_type=_maybe(rng, 0.3, "fixed_price"),
            fixed_contract_price=_maybe(rng, 0.3, rng.randint(100, 200)),
            fixed_contract_agreement_date=_maybe(
                rng, 0.3, now - timedelta(days=rng.randint(1, 365))
            ),
        ),
        substation=rng.randint(1, 20),
        dl=rng.randint(20, 50),
        fixed_contract_price=_maybe(rng, 0.3, rng.randint(100, 200)),
        guaranteed_capacity=round(-rng.uniform(10000, 30000), 3),
    )


def generate_plants(
    count: int,
    rng: random.Random,
    now: datetime | None = None,
) -> list[Plant]:
    """Fabricate *count* plants with ids 1..count."""
    now = now or datetime.now(tz=UTC)
    plants = [generate_plant(i + 1, rng, now) for i in range(count)]
    logger.info("Generated %d demo plant(s)", len(plants))
    return plants


def generate_rtu(
    rtu_id: str,
    plants: list[Plant],
    rng: random.Random,
    now: datetime,
) -> Rtu:
    """Fabricate one RTU, linked to a random plant most of the time."""
    status = rng.choices(
        list(RTU_STATUS_WEIGHTS), weights=list(RTU_STATUS_WEIGHTS.values())
    )[0]
    plant = rng.choice(plants) if plants and rng.random() < PLANT_LINK_RATIO else None
    installed: date = (now - timedelta(days=rng.randint(30, 3 * 365))).date()
    has_battery = rng.random() < 0.6

    return Rtu(
        id=rtu_id,
        name=f"RTU-{rtu_id}",
        type=rng.choice(RTU_TYPES),
        model=f"{rng.choice(MODEL_PREFIXES)}-{rng.choice(MODEL_SUFFIXES)}",
        manufacturer=rng.choice(MANUFACTURERS),
        firmware_version=f"v{rng.randint(1, 5)}.{rng.randint(0, 9)}.{rng.randint(0, 20)}",
        serial_number=f"SN{rng.randint(10_000_000, 99_999_999)}",
        installation_date=installed,
        last_maintenance_date=_maybe(
            rng, 0.7, installed + timedelta(days=rng.randint(1, 29))
        ),
        communication_protocol=rng.choice(list(CommunicationProtocol)),
        ip_address=_maybe(
            rng, 0.8, f"10.{rng.randint(0, 255)}.{rng.randint(0, 255)}.{rng.randint(1, 254)}"
        ),
        port=_maybe(rng, 0.8, rng.randint(1024, 65535)),
        status=status,
        plant_id=plant.id if plant else None,
        plant_name=plant.infra.name if plant else None,
        location=plant.infra.address if plant else rng.choice(REGIONS),
        description=_maybe(rng, 0.5, "Field telemetry unit"),
        last_connection=(
            None
            if status is RtuStatus.INACTIVE
            else now - timedelta(seconds=rng.randint(0, 3600))
        ),
        data_interval=rng.choice([10, 30, 60, 300, 600]),
        battery_level=rng.randint(0, 100) if has_battery else None,
        signal_strength=rng.randint(-120, -30) if rng.random() < 0.8 else None,
        notes=None,
    )


def generate_rtus(
    count: int,
    plants: list[Plant],
    rng: random.Random,
    now: datetime | None = None,
) -> list[Rtu]:
    """Fabricate *count* RTUs with zero-padded ids ``0001``, ``0002``, ..."""
    now = now or datetime.now(tz=UTC)
    rtus = [generate_rtu(f"{i + 1:04d}", plants, rng, now) for i in range(count)]
    logger.info("Generated %d demo RTU(s)", len(rtus))
    return rtus
