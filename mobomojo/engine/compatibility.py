"""Hardware compatibility rules for a single candidate component.

`evaluate(candidate, configuration)` checks one component against the
rest of a configuration and returns ordered violation messages. Rules are
partitioned by the candidate's category and run in a fixed order.

A rule only fires when both sides declare the attribute it compares.
Missing data skips the rule: it is neither a pass nor a violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from mobomojo.models.build import Configuration
from mobomojo.models.components import Component, ComponentType, category_name

# Estimated draw for everything not modeled individually
# (motherboard, memory, storage, fans)
BASE_SYSTEM_POWER = 150

# Sockets that hard-require one memory generation
SOCKET_MEMORY_REQUIREMENTS: Dict[str, str] = {
    "AM5": "DDR5",
    "AM4": "DDR4",
}

# Socket family whose memory generation is decided by the motherboard
MOTHERBOARD_MEMORY_SOCKET_PREFIX = "LGA1700"


# ──────────────────────────────────────────────
# Result Types
# ──────────────────────────────────────────────


@dataclass
class Violation:
    """A single compatibility violation."""

    rule: str
    message: str
    components_involved: List[str] = field(default_factory=list)


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────


def _get_spec(component: Optional[Component], key: str) -> Any:
    """Spec value of a (possibly missing) component, None when absent."""
    if component is None:
        return None
    return component.spec(key)


def _estimated_load(*draws: Optional[int]) -> int:
    """Sum of declared draws plus the baseline."""
    return sum(d for d in draws if d is not None) + BASE_SYSTEM_POWER


# ──────────────────────────────────────────────
# CPU Rules
# ──────────────────────────────────────────────


def check_cpu_motherboard_socket(
    cpu: Component, motherboard: Optional[Component]
) -> Optional[Violation]:
    """CPU.socket == Motherboard.socket"""
    cpu_socket = _get_spec(cpu, "socket")
    mobo_socket = _get_spec(motherboard, "socket")

    if cpu_socket is None or mobo_socket is None:
        return None

    if cpu_socket != mobo_socket:
        return Violation(
            rule="cpu_motherboard_socket",
            message=f"Incompatible socket with {motherboard.name}",
            components_involved=[cpu.name, motherboard.name],
        )
    return None


def check_cpu_memory_type(
    cpu: Component,
    ram: Optional[Component],
    motherboard: Optional[Component],
) -> Optional[Violation]:
    """Memory generation implied by the CPU socket.

    LGA1700 boards come in both generations, so the motherboard's
    declared memory type decides. AM5 / AM4 each require one generation.
    """
    cpu_socket = _get_spec(cpu, "socket")
    ram_type = _get_spec(ram, "ram_type")

    if cpu_socket is None or ram_type is None:
        return None

    if cpu_socket.startswith(MOTHERBOARD_MEMORY_SOCKET_PREFIX):
        mobo_memory = _get_spec(motherboard, "memory_type")
        if mobo_memory is not None and ram_type != mobo_memory:
            return Violation(
                rule="cpu_memory_type",
                message=f"Requires {mobo_memory} RAM for {motherboard.name}",
                components_involved=[cpu.name, ram.name, motherboard.name],
            )
        return None

    required = SOCKET_MEMORY_REQUIREMENTS.get(cpu_socket)
    if required is not None and ram_type != required:
        return Violation(
            rule="cpu_memory_type",
            message=f"This CPU requires {required} RAM ({ram.name} is {ram_type})",
            components_involved=[cpu.name, ram.name],
        )
    return None


def check_cpu_power_budget(
    cpu: Component, gpu: Optional[Component], psu: Optional[Component]
) -> Optional[Violation]:
    """PSU.wattage >= CPU.power_draw + GPU.power_draw + baseline"""
    cpu_draw = _get_spec(cpu, "power_draw")
    wattage = _get_spec(psu, "wattage")

    if cpu_draw is None or wattage is None:
        return None

    estimate = _estimated_load(cpu_draw, _get_spec(gpu, "power_draw"))
    if wattage < estimate:
        return Violation(
            rule="cpu_power_budget",
            message=(
                f"PSU {psu.name} may be insufficient "
                f"({wattage}W for {estimate}W estimated)"
            ),
            components_involved=[cpu.name, psu.name],
        )
    return None


# ──────────────────────────────────────────────
# Motherboard Rules
# ──────────────────────────────────────────────


def check_motherboard_cpu_socket(
    motherboard: Component, cpu: Optional[Component]
) -> Optional[Violation]:
    """Motherboard.socket == CPU.socket"""
    mobo_socket = _get_spec(motherboard, "socket")
    cpu_socket = _get_spec(cpu, "socket")

    if mobo_socket is None or cpu_socket is None:
        return None

    if mobo_socket != cpu_socket:
        return Violation(
            rule="motherboard_cpu_socket",
            message=f"Incompatible socket with {cpu.name}",
            components_involved=[motherboard.name, cpu.name],
        )
    return None


def check_motherboard_ram_type(
    motherboard: Component, ram: Optional[Component]
) -> Optional[Violation]:
    """Motherboard.memory_type == RAM.ram_type"""
    mobo_memory = _get_spec(motherboard, "memory_type")
    ram_type = _get_spec(ram, "ram_type")

    if mobo_memory is None or ram_type is None:
        return None

    if mobo_memory != ram_type:
        return Violation(
            rule="motherboard_ram_type",
            message=f"Incompatible RAM type with {ram.name}",
            components_involved=[motherboard.name, ram.name],
        )
    return None


def check_motherboard_case_form_factor(
    motherboard: Component, case: Optional[Component]
) -> Optional[Violation]:
    """Motherboard.form_factor IN Case.supported_form_factors"""
    form_factor = _get_spec(motherboard, "form_factor")
    supported = _get_spec(case, "supported_form_factors")

    if form_factor is None or supported is None:
        return None

    if form_factor not in supported:
        return Violation(
            rule="motherboard_case_form_factor",
            message=f"{form_factor} form factor not supported by {case.name}",
            components_involved=[motherboard.name, case.name],
        )
    return None


# ──────────────────────────────────────────────
# RAM Rules
# ──────────────────────────────────────────────


def check_ram_motherboard_type(
    ram: Component, motherboard: Optional[Component]
) -> Optional[Violation]:
    """RAM.ram_type == Motherboard.memory_type"""
    ram_type = _get_spec(ram, "ram_type")
    mobo_memory = _get_spec(motherboard, "memory_type")

    if ram_type is None or mobo_memory is None:
        return None

    if ram_type != mobo_memory:
        return Violation(
            rule="ram_motherboard_type",
            message=f"Incompatible RAM type for {motherboard.name}",
            components_involved=[ram.name, motherboard.name],
        )
    return None


def check_ram_cpu_memory_type(
    ram: Component, cpu: Optional[Component]
) -> Optional[Violation]:
    """RAM.ram_type == generation required by the CPU socket (AM5 / AM4)"""
    ram_type = _get_spec(ram, "ram_type")
    cpu_socket = _get_spec(cpu, "socket")

    if ram_type is None or cpu_socket is None:
        return None

    required = SOCKET_MEMORY_REQUIREMENTS.get(cpu_socket)
    if required is not None and ram_type != required:
        return Violation(
            rule="ram_cpu_memory_type",
            message=f"Incompatible with {cpu.name} ({cpu_socket} requires {required})",
            components_involved=[ram.name, cpu.name],
        )
    return None


# ──────────────────────────────────────────────
# GPU Rules
# ──────────────────────────────────────────────


def check_gpu_case_length(
    gpu: Component, case: Optional[Component]
) -> Optional[Violation]:
    """GPU.length <= Case.max_gpu_length"""
    length = _get_spec(gpu, "length")
    max_length = _get_spec(case, "max_gpu_length")

    if length is None or max_length is None:
        return None

    if length > max_length:
        return Violation(
            rule="gpu_case_length",
            message=f"Too long for {case.name} (max {max_length}mm)",
            components_involved=[gpu.name, case.name],
        )
    return None


def check_gpu_power_budget(
    gpu: Component, cpu: Optional[Component], psu: Optional[Component]
) -> Optional[Violation]:
    """PSU.wattage >= GPU.power_draw + CPU.power_draw + baseline"""
    gpu_draw = _get_spec(gpu, "power_draw")
    wattage = _get_spec(psu, "wattage")

    if gpu_draw is None or wattage is None:
        return None

    estimate = _estimated_load(gpu_draw, _get_spec(cpu, "power_draw"))
    if wattage < estimate:
        return Violation(
            rule="gpu_power_budget",
            message=(
                f"PSU {psu.name} may be insufficient "
                f"({wattage}W for {estimate}W estimated)"
            ),
            components_involved=[gpu.name, psu.name],
        )
    return None


# ──────────────────────────────────────────────
# PSU Rules
# ──────────────────────────────────────────────


def check_psu_wattage(
    psu: Component, cpu: Optional[Component], gpu: Optional[Component]
) -> Optional[Violation]:
    """PSU.wattage >= CPU.power_draw + GPU.power_draw + baseline

    Needs at least one declared draw; the baseline alone is not a build.
    """
    wattage = _get_spec(psu, "wattage")
    cpu_draw = _get_spec(cpu, "power_draw")
    gpu_draw = _get_spec(gpu, "power_draw")

    if wattage is None or (cpu_draw is None and gpu_draw is None):
        return None

    estimate = _estimated_load(cpu_draw, gpu_draw)
    if wattage < estimate:
        load = [
            c.name for c, draw in ((cpu, cpu_draw), (gpu, gpu_draw))
            if draw is not None
        ]
        return Violation(
            rule="psu_wattage",
            message=(
                f"May be insufficient wattage for current build "
                f"({wattage}W for {estimate}W estimated with {' + '.join(load)})"
            ),
            components_involved=[psu.name] + load,
        )
    return None


# ──────────────────────────────────────────────
# Case Rules
# ──────────────────────────────────────────────


def check_case_motherboard_form_factor(
    case: Component, motherboard: Optional[Component]
) -> Optional[Violation]:
    """Motherboard.form_factor IN Case.supported_form_factors"""
    supported = _get_spec(case, "supported_form_factors")
    form_factor = _get_spec(motherboard, "form_factor")

    if supported is None or form_factor is None:
        return None

    if form_factor not in supported:
        return Violation(
            rule="case_motherboard_form_factor",
            message=f"Does not support {form_factor} motherboard {motherboard.name}",
            components_involved=[case.name, motherboard.name],
        )
    return None


def check_case_gpu_length(
    case: Component, gpu: Optional[Component]
) -> Optional[Violation]:
    """Case.max_gpu_length >= GPU.length"""
    max_length = _get_spec(case, "max_gpu_length")
    length = _get_spec(gpu, "length")

    if max_length is None or length is None:
        return None

    if length > max_length:
        return Violation(
            rule="case_gpu_length",
            message=f"GPU {gpu.name} is too long (max {max_length}mm)",
            components_involved=[case.name, gpu.name],
        )
    return None


def check_case_cooler_height(
    case: Component, cooler: Optional[Component]
) -> Optional[Violation]:
    """Case.max_cooler_height >= Cooler.height"""
    max_height = _get_spec(case, "max_cooler_height")
    height = _get_spec(cooler, "height")

    if max_height is None or height is None:
        return None

    if height > max_height:
        return Violation(
            rule="case_cooler_height",
            message=f"CPU Cooler {cooler.name} is too tall (max {max_height}mm)",
            components_involved=[case.name, cooler.name],
        )
    return None


# ──────────────────────────────────────────────
# Cooler Rules
# ──────────────────────────────────────────────


def check_cooler_case_height(
    cooler: Component, case: Optional[Component]
) -> Optional[Violation]:
    """Cooler.height <= Case.max_cooler_height"""
    height = _get_spec(cooler, "height")
    max_height = _get_spec(case, "max_cooler_height")

    if height is None or max_height is None:
        return None

    if height > max_height:
        return Violation(
            rule="cooler_case_height",
            message=f"Too tall for {case.name} (max {max_height}mm)",
            components_involved=[cooler.name, case.name],
        )
    return None


# ──────────────────────────────────────────────
# Per-category dispatch
# ──────────────────────────────────────────────


def _cpu_rules(cpu: Component, config: Configuration) -> List[Optional[Violation]]:
    motherboard = config.get(ComponentType.MOTHERBOARD)
    return [
        check_cpu_motherboard_socket(cpu, motherboard),
        check_cpu_memory_type(cpu, config.get(ComponentType.RAM), motherboard),
        check_cpu_power_budget(
            cpu, config.get(ComponentType.GPU), config.get(ComponentType.PSU)
        ),
    ]


def _motherboard_rules(
    motherboard: Component, config: Configuration
) -> List[Optional[Violation]]:
    return [
        check_motherboard_cpu_socket(motherboard, config.get(ComponentType.CPU)),
        check_motherboard_ram_type(motherboard, config.get(ComponentType.RAM)),
        check_motherboard_case_form_factor(motherboard, config.get(ComponentType.CASE)),
    ]


def _ram_rules(ram: Component, config: Configuration) -> List[Optional[Violation]]:
    return [
        check_ram_motherboard_type(ram, config.get(ComponentType.MOTHERBOARD)),
        check_ram_cpu_memory_type(ram, config.get(ComponentType.CPU)),
    ]


def _gpu_rules(gpu: Component, config: Configuration) -> List[Optional[Violation]]:
    return [
        check_gpu_case_length(gpu, config.get(ComponentType.CASE)),
        check_gpu_power_budget(
            gpu, config.get(ComponentType.CPU), config.get(ComponentType.PSU)
        ),
    ]


def _psu_rules(psu: Component, config: Configuration) -> List[Optional[Violation]]:
    return [
        check_psu_wattage(
            psu, config.get(ComponentType.CPU), config.get(ComponentType.GPU)
        ),
    ]


def _case_rules(case: Component, config: Configuration) -> List[Optional[Violation]]:
    return [
        check_case_motherboard_form_factor(case, config.get(ComponentType.MOTHERBOARD)),
        check_case_gpu_length(case, config.get(ComponentType.GPU)),
        check_case_cooler_height(case, config.get(ComponentType.COOLER)),
    ]


def _cooler_rules(cooler: Component, config: Configuration) -> List[Optional[Violation]]:
    return [check_cooler_case_height(cooler, config.get(ComponentType.CASE))]


def _storage_rules(storage: Component, config: Configuration) -> List[Optional[Violation]]:
    # No cross-component constraints for storage
    return []


CATEGORY_RULES: Dict[
    ComponentType, Callable[[Component, Configuration], List[Optional[Violation]]]
] = {
    ComponentType.CPU: _cpu_rules,
    ComponentType.MOTHERBOARD: _motherboard_rules,
    ComponentType.RAM: _ram_rules,
    ComponentType.GPU: _gpu_rules,
    ComponentType.STORAGE: _storage_rules,
    ComponentType.PSU: _psu_rules,
    ComponentType.CASE: _case_rules,
    ComponentType.COOLER: _cooler_rules,
}


# ──────────────────────────────────────────────
# Main Entry Points
# ──────────────────────────────────────────────


def check_component(
    candidate: Component, configuration: Configuration
) -> List[Violation]:
    """Run the candidate's category rules against a configuration.

    The slot of the candidate's own category is ignored, so passing the
    configuration the candidate already sits in gives the same answer as
    passing it with that slot cleared. Foreign categories have no rules.
    """
    try:
        category = ComponentType(category_name(candidate.type))
    except ValueError:
        return []

    rules = CATEGORY_RULES[category]
    others = configuration.without(category)
    return [v for v in rules(candidate, others) if v is not None]


def evaluate(candidate: Component, configuration: Configuration) -> List[str]:
    """Ordered violation messages for a candidate; empty when compatible."""
    return [v.message for v in check_component(candidate, configuration)]
