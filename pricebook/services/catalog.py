"""
Reference catalog: service types, product types and their variants.

Immutable data defined at import time. Prices are not stored here; they live
in price override records keyed by (product_type_id, variant_id).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class ServiceType:
    id: str
    name: str
    description: str
    default_margin: float
    minimum_margin: float


@dataclass(frozen=True)
class ProductVariant:
    id: str
    name: str
    description: str
    specifications: Tuple[str, ...] = ()
    is_default: bool = False


@dataclass(frozen=True)
class ProductType:
    id: str
    name: str
    description: str
    service_type_id: str
    category: str
    variants: Tuple[ProductVariant, ...] = field(default_factory=tuple)

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((v for v in self.variants if v.id == variant_id), None)

    def matches(self, search: str) -> bool:
        """Case-insensitive match on the type name or any variant name."""
        needle = search.lower()
        return needle in self.name.lower() or any(needle in v.name.lower() for v in self.variants)


class Catalog:
    """Lookup helpers over a fixed set of service and product types"""

    def __init__(self, service_types: Iterable[ServiceType], product_types: Iterable[ProductType]):
        self.service_types: List[ServiceType] = list(service_types)
        self.product_types: List[ProductType] = list(product_types)
        self._by_id: Dict[str, ProductType] = {pt.id: pt for pt in self.product_types}

    def get_service_type(self, service_type_id: str) -> Optional[ServiceType]:
        return next((s for s in self.service_types if s.id == service_type_id), None)

    def get_product_type(self, product_type_id: str) -> Optional[ProductType]:
        return self._by_id.get(product_type_id)

    def get_variant(self, product_type_id: str, variant_id: str) -> Optional[ProductVariant]:
        product_type = self.get_product_type(product_type_id)
        return product_type.get_variant(variant_id) if product_type else None

    def filter_product_types(
        self,
        service_type_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[ProductType]:
        result = self.product_types
        if service_type_id:
            result = [pt for pt in result if pt.service_type_id == service_type_id]
        if search:
            result = [pt for pt in result if pt.matches(search)]
        return list(result)


def _variant(id, name, description, specifications, is_default=False) -> ProductVariant:
    return ProductVariant(id, name, description, tuple(specifications), is_default)


# ============================================================================
# Default catalog
# ============================================================================

DEFAULT_SERVICE_TYPES = (
    ServiceType("videosurveillance", "Video surveillance", "IP video surveillance systems", 30, 20),
    ServiceType("domotique", "Home automation", "Residential automation systems", 40, 30),
    ServiceType("controle_acces", "Access control", "Access control systems", 35, 25),
    ServiceType("network_cabling", "Network cabling", "Network infrastructure and cabling", 35, 25),
    ServiceType("fiber_optic", "Fiber optics", "Fiber optic infrastructure", 30, 20),
)

VIDEOSURVEILLANCE_PRODUCTS = (
    ProductType(
        "nvr_systems", "NVR recorders", "Network video recording systems", "videosurveillance", "recording",
        (
            _variant("nvr_4ch", "NVR 4 channels", "4-channel recorder for small sites",
                     ["4 PoE channels", "4K H.265+", "1x SATA", "HDMI 4K", "40Mbps bandwidth"]),
            _variant("nvr_8ch", "NVR 8 channels", "8-channel recorder for medium sites",
                     ["8 PoE channels", "4K H.265+", "1x SATA", "HDMI 4K", "80Mbps bandwidth"], True),
            _variant("nvr_16ch", "NVR 16 channels", "16-channel recorder for large sites",
                     ["16 PoE channels", "4K H.265+", "2x SATA", "HDMI 4K", "160Mbps bandwidth"]),
            _variant("nvr_32ch", "NVR 32 channels", "32-channel recorder for very large sites",
                     ["32 PoE channels", "4K H.265+", "4x SATA", "HDMI 4K", "320Mbps bandwidth"]),
            _variant("nvr_64ch", "NVR 64 channels", "64-channel recorder for enterprise sites",
                     ["64 PoE channels", "4K H.265+", "8x SATA", "HDMI 4K", "640Mbps bandwidth"]),
        ),
    ),
    ProductType(
        "surveillance_cameras", "Surveillance cameras", "High definition IP cameras", "videosurveillance", "cameras",
        (
            _variant("camera_dome_2mp", "Dome camera 2MP", "Indoor 2MP dome",
                     ["2MP Full HD", "20m night vision", "PoE", "IP67", "110° angle"]),
            _variant("camera_dome_4mp", "Dome camera 4MP", "Indoor 4MP dome",
                     ["4MP Super HD", "30m night vision", "PoE", "IP67", "110° angle"], True),
            _variant("camera_dome_4k", "Dome camera 4K", "Indoor 4K dome",
                     ["4K UHD", "30m night vision", "PoE+", "IP67", "110° angle"]),
            _variant("camera_bullet_2mp", "Bullet camera 2MP", "Outdoor 2MP bullet",
                     ["2MP Full HD", "40m night vision", "PoE", "IP67", "90° angle"]),
            _variant("camera_bullet_4mp", "Bullet camera 4MP", "Outdoor 4MP bullet",
                     ["4MP Super HD", "50m night vision", "PoE", "IP67", "90° angle"], True),
            _variant("camera_bullet_4k", "Bullet camera 4K", "Outdoor 4K bullet",
                     ["4K UHD", "60m night vision", "PoE+", "IP67", "90° angle"]),
            _variant("camera_ptz_4mp", "PTZ camera 4MP", "Motorised 4MP camera",
                     ["4MP Super HD", "25x optical zoom", "150m night vision", "PoE++", "IP66"]),
            _variant("camera_ptz_4k", "PTZ camera 4K", "Motorised 4K camera",
                     ["4K UHD", "32x optical zoom", "200m night vision", "PoE++", "IP66"]),
        ),
    ),
    ProductType(
        "storage_systems", "Storage systems", "Hard drives and storage", "videosurveillance", "storage",
        (
            _variant("hdd_2tb", "Hard drive 2TB", "Surveillance-grade 2TB drive",
                     ["2TB", "Surveillance optimised", "3 year warranty", "7200 RPM"]),
            _variant("hdd_4tb", "Hard drive 4TB", "Surveillance-grade 4TB drive",
                     ["4TB", "Surveillance optimised", "3 year warranty", "7200 RPM"], True),
            _variant("hdd_8tb", "Hard drive 8TB", "Surveillance-grade 8TB drive",
                     ["8TB", "Surveillance optimised", "3 year warranty", "7200 RPM"]),
            _variant("hdd_12tb", "Hard drive 12TB", "Surveillance-grade 12TB drive",
                     ["12TB", "Surveillance optimised", "3 year warranty", "7200 RPM"]),
        ),
    ),
    ProductType(
        "network_equipment", "Network equipment", "Switches and network gear", "videosurveillance", "network",
        (
            _variant("switch_poe_8p", "PoE switch 8 ports", "PoE switch for small sites",
                     ["8 PoE ports", "120W budget", "Gigabit", "Unmanaged"], True),
            _variant("switch_poe_16p", "PoE switch 16 ports", "PoE switch for medium sites",
                     ["16 PoE ports", "250W budget", "Gigabit", "Managed"]),
            _variant("switch_poe_24p", "PoE switch 24 ports", "PoE switch for large sites",
                     ["24 PoE+ ports", "370W budget", "Gigabit", "Managed L2"]),
        ),
    ),
)

DOMOTIQUE_PRODUCTS = (
    ProductType(
        "smart_hubs", "Hubs and controllers", "Home automation control centres", "domotique", "hubs",
        (
            _variant("hub_zigbee_basic", "Zigbee hub basic", "Entry hub for small installations",
                     ["Zigbee 3.0", "WiFi 2.4GHz", "Up to 50 devices", "Mobile app"], True),
            _variant("hub_zigbee_pro", "Zigbee hub pro", "Professional hub for large installations",
                     ["Zigbee 3.0", "WiFi 2.4/5GHz", "Up to 200 devices", "Mobile app", "Local API"]),
            _variant("hub_matter", "Matter universal hub", "Matter/Thread compatible hub",
                     ["Matter/Thread", "Zigbee 3.0", "WiFi 6", "Up to 500 devices", "Full API"]),
        ),
    ),
    ProductType(
        "smart_switches", "Smart switches", "Connected switches and dimmers", "domotique", "switches",
        (
            _variant("switch_1gang", "1-gang switch", "Single connected switch",
                     ["1 gang", "WiFi/Zigbee", "16A max", "No neutral"], True),
            _variant("switch_2gang", "2-gang switch", "Double connected switch",
                     ["2 gangs", "WiFi/Zigbee", "16A max", "No neutral"]),
            _variant("switch_3gang", "3-gang switch", "Triple connected switch",
                     ["3 gangs", "WiFi/Zigbee", "16A max", "No neutral"]),
            _variant("dimmer_1gang", "1-gang dimmer", "Connected light dimmer",
                     ["1 gang", "WiFi/Zigbee", "300W max", "Dimming 1-100%"]),
        ),
    ),
    ProductType(
        "smart_sensors", "Smart sensors", "Motion, temperature and other sensors", "domotique", "sensors",
        (
            _variant("motion_sensor", "Motion sensor", "Smart PIR detector",
                     ["PIR", "Zigbee 3.0", "2 year battery", "120° angle"], True),
            _variant("door_sensor", "Door sensor", "Door/window contact",
                     ["Magnetic contact", "Zigbee 3.0", "2 year battery", "Waterproof"], True),
            _variant("temp_humidity_sensor", "Temperature/humidity sensor", "Environmental probe",
                     ["Temperature ±0.3°C", "Humidity ±3%", "Zigbee 3.0", "LCD screen"]),
            _variant("smoke_detector", "Smoke detector", "Connected smoke detector",
                     ["Photoelectric detection", "Zigbee 3.0", "10 year battery", "85dB siren"]),
        ),
    ),
    ProductType(
        "smart_plugs", "Plugs and modules", "Connected plugs and micro-modules", "domotique", "plugs",
        (
            _variant("smart_plug_16a", "Smart plug 16A", "Smart plug with metering",
                     ["16A max", "Zigbee 3.0", "Energy metering", "Child protection"], True),
            _variant("micro_module_switch", "Switch micro-module", "In-wall module without neutral",
                     ["No neutral", "Zigbee 3.0", "16A max", "Compact"], True),
            _variant("micro_module_dimmer", "Dimmer micro-module", "In-wall dimmer module",
                     ["Neutral required", "Zigbee 3.0", "300W max", "Dimming 1-100%"]),
        ),
    ),
)

DEFAULT_CATALOG = Catalog(
    DEFAULT_SERVICE_TYPES,
    VIDEOSURVEILLANCE_PRODUCTS + DOMOTIQUE_PRODUCTS,
)


def get_catalog() -> Catalog:
    """FastAPI dependency returning the reference catalog."""
    return DEFAULT_CATALOG
