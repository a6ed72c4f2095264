"""Tests for the per-category hardware compatibility rules."""

import pytest

from mobomojo.engine.compatibility import (
    BASE_SYSTEM_POWER,
    check_case_cooler_height,
    check_case_gpu_length,
    check_case_motherboard_form_factor,
    check_component,
    check_cooler_case_height,
    check_cpu_memory_type,
    check_cpu_motherboard_socket,
    check_cpu_power_budget,
    check_gpu_case_length,
    check_gpu_power_budget,
    check_motherboard_case_form_factor,
    check_motherboard_cpu_socket,
    check_motherboard_ram_type,
    check_psu_wattage,
    check_ram_cpu_memory_type,
    check_ram_motherboard_type,
    evaluate,
)
from mobomojo.models.build import Configuration
from mobomojo.models.components import CATEGORY_ORDER, Component


# ──────────────────────────────────────────────
# Test fixtures: helper builders
# ──────────────────────────────────────────────


def _make(type_: str, name: str = "Test", specs: dict | None = None, **kw):
    """Quick Component factory."""
    return Component(
        id=kw.get("id", f"{type_.lower()}-{name}"),
        name=name,
        type=type_,
        price=kw.get("price", 10000),
        specs=specs or {},
    )


def _config(*components: Component) -> Configuration:
    return Configuration.of(*components)


# ──────────────────────────────────────────────
# CPU ↔ Motherboard socket
# ──────────────────────────────────────────────


class TestCpuMotherboardSocket:
    def test_matching_socket_passes(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        mobo = _make("Motherboard", "B650M", {"socket": "AM5"})
        assert check_cpu_motherboard_socket(cpu, mobo) is None

    def test_mismatched_socket_fails(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        mobo = _make("Motherboard", "B760M", {"socket": "LGA1700"})
        v = check_cpu_motherboard_socket(cpu, mobo)
        assert v is not None
        assert v.rule == "cpu_motherboard_socket"
        assert v.message == "Incompatible socket with B760M"

    def test_missing_socket_skipped(self):
        cpu = _make("CPU", "Unknown CPU", {})
        mobo = _make("Motherboard", "B650M", {"socket": "AM5"})
        assert check_cpu_motherboard_socket(cpu, mobo) is None

    def test_missing_motherboard_skipped(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        assert check_cpu_motherboard_socket(cpu, None) is None

    def test_motherboard_side_mirrors_cpu_side(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        mobo = _make("Motherboard", "B760M", {"socket": "LGA1700"})
        v = check_motherboard_cpu_socket(mobo, cpu)
        assert v is not None
        assert v.message == "Incompatible socket with Ryzen 5 7600"


# ──────────────────────────────────────────────
# CPU memory generation (socket family dependent)
# ──────────────────────────────────────────────


class TestCpuMemoryType:
    def test_am5_requires_ddr5(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        ram = _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"})
        v = check_cpu_memory_type(cpu, ram, None)
        assert v is not None
        assert v.message == "This CPU requires DDR5 RAM (Ripjaws DDR4 is DDR4)"

    def test_am4_requires_ddr4(self):
        cpu = _make("CPU", "Ryzen 5 5600", {"socket": "AM4"})
        ram = _make("RAM", "Fury DDR5", {"ramType": "DDR5"})
        v = check_cpu_memory_type(cpu, ram, None)
        assert v is not None
        assert "requires DDR4 RAM" in v.message

    def test_am5_with_ddr5_passes(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        ram = _make("RAM", "Fury DDR5", {"ramType": "DDR5"})
        assert check_cpu_memory_type(cpu, ram, None) is None

    def test_lga1700_follows_motherboard_memory_type(self):
        cpu = _make("CPU", "i5-13400F", {"socket": "LGA1700"})
        ram = _make("RAM", "Fury DDR5", {"ramType": "DDR5"})
        mobo = _make("Motherboard", "B760M DDR4", {"memoryType": "DDR4"})
        v = check_cpu_memory_type(cpu, ram, mobo)
        assert v is not None
        assert v.message == "Requires DDR4 RAM for B760M DDR4"

    def test_lga1700_without_motherboard_skipped(self):
        """No hard-coded generation for LGA1700: the board decides."""
        cpu = _make("CPU", "i5-13400F", {"socket": "LGA1700"})
        ram = _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"})
        assert check_cpu_memory_type(cpu, ram, None) is None

    def test_lga1700_matching_motherboard_passes(self):
        cpu = _make("CPU", "i5-13400F", {"socket": "LGA1700"})
        ram = _make("RAM", "Fury DDR5", {"ramType": "DDR5"})
        mobo = _make("Motherboard", "Z790-I", {"memoryType": "DDR5"})
        assert check_cpu_memory_type(cpu, ram, mobo) is None

    def test_other_socket_unconstrained(self):
        cpu = _make("CPU", "Old Xeon", {"socket": "LGA2011"})
        ram = _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"})
        assert check_cpu_memory_type(cpu, ram, None) is None

    def test_missing_ram_type_skipped(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        ram = _make("RAM", "Mystery Kit", {})
        assert check_cpu_memory_type(cpu, ram, None) is None

    def test_ram_side_mirrors_am5_rule(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5"})
        ram = _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"})
        v = check_ram_cpu_memory_type(ram, cpu)
        assert v is not None
        assert v.message == "Incompatible with Ryzen 5 7600 (AM5 requires DDR5)"

    def test_ram_side_ignores_lga1700(self):
        cpu = _make("CPU", "i5-13400F", {"socket": "LGA1700"})
        ram = _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"})
        assert check_ram_cpu_memory_type(ram, cpu) is None


# ──────────────────────────────────────────────
# Motherboard ↔ RAM type
# ──────────────────────────────────────────────


class TestMotherboardRamType:
    def test_matching_ddr_passes(self):
        ram = _make("RAM", "DDR5 Kit", {"ramType": "DDR5"})
        mobo = _make("Motherboard", "B650M", {"memoryType": "DDR5"})
        assert check_ram_motherboard_type(ram, mobo) is None
        assert check_motherboard_ram_type(mobo, ram) is None

    def test_mismatched_ddr_fails_both_ways(self):
        ram = _make("RAM", "DDR4 Kit", {"ramType": "DDR4"})
        mobo = _make("Motherboard", "B650M", {"memoryType": "DDR5"})
        assert check_ram_motherboard_type(ram, mobo).message == (
            "Incompatible RAM type for B650M"
        )
        assert check_motherboard_ram_type(mobo, ram).message == (
            "Incompatible RAM type with DDR4 Kit"
        )

    def test_missing_memory_type_skipped(self):
        ram = _make("RAM", "DDR4 Kit", {"ramType": "DDR4"})
        mobo = _make("Motherboard", "Unknown board", {})
        assert check_ram_motherboard_type(ram, mobo) is None
        assert check_motherboard_ram_type(mobo, ram) is None


# ──────────────────────────────────────────────
# Form factor: Motherboard ↔ Case
# ──────────────────────────────────────────────


class TestFormFactor:
    def test_supported_form_factor_passes(self):
        mobo = _make("Motherboard", "B650M", {"formFactor": "Micro-ATX"})
        case = _make("Case", "H5 Flow", {"supportedFormFactors": ["ATX", "Micro-ATX"]})
        assert check_motherboard_case_form_factor(mobo, case) is None
        assert check_case_motherboard_form_factor(case, mobo) is None

    def test_unsupported_form_factor_fails(self):
        mobo = _make("Motherboard", "X670E-E", {"formFactor": "ATX"})
        case = _make("Case", "NR200P", {"supportedFormFactors": ["Mini-ITX"]})
        v = check_motherboard_case_form_factor(mobo, case)
        assert v is not None
        assert v.message == "ATX form factor not supported by NR200P"

        v = check_case_motherboard_form_factor(case, mobo)
        assert v is not None
        assert v.message == "Does not support ATX motherboard X670E-E"

    def test_missing_support_list_skipped(self):
        mobo = _make("Motherboard", "X670E-E", {"formFactor": "ATX"})
        case = _make("Case", "Unknown case", {})
        assert check_motherboard_case_form_factor(mobo, case) is None
        assert check_case_motherboard_form_factor(case, mobo) is None


# ──────────────────────────────────────────────
# Clearances
# ──────────────────────────────────────────────


class TestClearances:
    def test_gpu_too_long_names_limit(self):
        gpu = _make("GPU", "RTX 4080", {"length": 340})
        case = _make("Case", "Air 100", {"maxGpuLength": 330})
        v = check_gpu_case_length(gpu, case)
        assert v is not None
        assert v.message == "Too long for Air 100 (max 330mm)"

    def test_gpu_that_fits_passes(self):
        gpu = _make("GPU", "RTX 4060", {"length": 300})
        case = _make("Case", "Air 100", {"maxGpuLength": 330})
        assert check_gpu_case_length(gpu, case) is None

    def test_gpu_exact_length_passes(self):
        gpu = _make("GPU", "RTX 4060", {"length": 330})
        case = _make("Case", "Air 100", {"maxGpuLength": 330})
        assert check_gpu_case_length(gpu, case) is None

    def test_case_side_reports_long_gpu(self):
        gpu = _make("GPU", "RTX 4080", {"length": 340})
        case = _make("Case", "Air 100", {"maxGpuLength": 330})
        v = check_case_gpu_length(case, gpu)
        assert v is not None
        assert v.message == "GPU RTX 4080 is too long (max 330mm)"

    def test_cooler_too_tall(self):
        cooler = _make("Cooler", "NH-D15", {"height": 165})
        case = _make("Case", "NR200P", {"maxCoolerHeight": 155})
        assert check_cooler_case_height(cooler, case).message == (
            "Too tall for NR200P (max 155mm)"
        )
        assert check_case_cooler_height(case, cooler).message == (
            "CPU Cooler NH-D15 is too tall (max 155mm)"
        )

    def test_cooler_missing_height_skipped(self):
        cooler = _make("Cooler", "Mystery", {})
        case = _make("Case", "NR200P", {"maxCoolerHeight": 155})
        assert check_cooler_case_height(cooler, case) is None
        assert check_case_cooler_height(case, cooler) is None


# ──────────────────────────────────────────────
# Power budget
# ──────────────────────────────────────────────


class TestPowerBudget:
    """CPU 65W + GPU 220W + 150W baseline = 435W."""

    cpu = _make("CPU", "Ryzen 5 7600", {"powerDraw": 65})
    gpu = _make("GPU", "RX 7700", {"powerDraw": 220})

    def test_baseline_constant(self):
        assert BASE_SYSTEM_POWER == 150

    def test_psu_400_insufficient(self):
        psu = _make("PSU", "400W", {"wattage": 400})
        v = check_psu_wattage(psu, self.cpu, self.gpu)
        assert v is not None
        assert "400W" in v.message
        assert "435W" in v.message

    def test_psu_message_names_load(self):
        psu = _make("PSU", "CX400", {"wattage": 400})
        v = check_psu_wattage(psu, self.cpu, self.gpu)
        assert v.message == (
            "May be insufficient wattage for current build "
            "(400W for 435W estimated with Ryzen 5 7600 + RX 7700)"
        )
        assert v.components_involved == ["CX400", "Ryzen 5 7600", "RX 7700"]

    def test_psu_message_skips_undeclared_draw(self):
        psu = _make("PSU", "Tiny 100W", {"wattage": 100})
        cpu = _make("CPU", "No draw data", {"socket": "AM5"})
        v = check_psu_wattage(psu, cpu, self.gpu)
        assert v.message.endswith("(100W for 370W estimated with RX 7700)")

    def test_psu_500_sufficient(self):
        psu = _make("PSU", "500W", {"wattage": 500})
        assert check_psu_wattage(psu, self.cpu, self.gpu) is None

    def test_psu_exact_wattage_passes(self):
        psu = _make("PSU", "435W", {"wattage": 435})
        assert check_psu_wattage(psu, self.cpu, self.gpu) is None

    def test_cpu_candidate_names_psu_wattage(self):
        psu = _make("PSU", "CX400", {"wattage": 400})
        v = check_cpu_power_budget(self.cpu, self.gpu, psu)
        assert v is not None
        assert v.message == "PSU CX400 may be insufficient (400W for 435W estimated)"

    def test_gpu_candidate_names_psu_wattage(self):
        psu = _make("PSU", "CX400", {"wattage": 400})
        v = check_gpu_power_budget(self.gpu, self.cpu, psu)
        assert v is not None
        assert "400W" in v.message

    def test_gpu_candidate_without_cpu_uses_baseline(self):
        psu = _make("PSU", "CX400", {"wattage": 400})
        assert check_gpu_power_budget(self.gpu, None, psu) is None  # 370W

    def test_psu_without_draws_skipped(self):
        """A PSU is never judged against the baseline alone."""
        psu = _make("PSU", "Tiny 100W", {"wattage": 100})
        assert check_psu_wattage(psu, None, None) is None
        cpu = _make("CPU", "No draw data", {"socket": "AM5"})
        assert check_psu_wattage(psu, cpu, None) is None

    def test_missing_wattage_skipped(self):
        psu = _make("PSU", "Unlabeled", {})
        assert check_psu_wattage(psu, self.cpu, self.gpu) is None
        assert check_cpu_power_budget(self.cpu, self.gpu, psu) is None

    def test_cpu_without_draw_skipped(self):
        cpu = _make("CPU", "No draw data", {})
        psu = _make("PSU", "Tiny 100W", {"wattage": 100})
        assert check_cpu_power_budget(cpu, self.gpu, psu) is None


# ──────────────────────────────────────────────
# evaluate(): dispatch, order, purity
# ──────────────────────────────────────────────


class TestEvaluate:
    def test_every_category_empty_configuration_is_clean(self):
        for category in CATEGORY_ORDER:
            candidate = _make(category.value, "Bare")
            assert evaluate(candidate, Configuration()) == []

    def test_every_category_without_attributes_is_clean(self):
        """Occupied slots with no declared attributes never fire a rule."""
        config = _config(*[_make(c.value, f"Bare {c.value}") for c in CATEGORY_ORDER])
        for category in CATEGORY_ORDER:
            candidate = _make(category.value, "Other bare")
            assert evaluate(candidate, config) == []

    def test_storage_always_compatible(self):
        storage = _make("Storage", "990 Pro", {"capacity": "1TB"})
        config = _config(
            _make("CPU", "Ryzen", {"socket": "AM5", "powerDraw": 500}),
            _make("PSU", "Tiny", {"wattage": 100}),
        )
        assert evaluate(storage, config) == []

    def test_foreign_category_unconstrained(self):
        monitor = _make("Monitor", "27in IPS", {"size": "27"})
        config = _config(_make("Case", "Tiny", {"maxGpuLength": 1}))
        assert evaluate(monitor, config) == []

    def test_cpu_rule_order(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5", "powerDraw": 65})
        config = _config(
            _make("Motherboard", "B760M", {"socket": "LGA1700"}),
            _make("RAM", "Ripjaws DDR4", {"ramType": "DDR4"}),
            _make("GPU", "RX 7700", {"powerDraw": 220}),
            _make("PSU", "CX400", {"wattage": 400}),
        )
        assert evaluate(cpu, config) == [
            "Incompatible socket with B760M",
            "This CPU requires DDR5 RAM (Ripjaws DDR4 is DDR4)",
            "PSU CX400 may be insufficient (400W for 435W estimated)",
        ]
        assert [v.rule for v in check_component(cpu, config)] == [
            "cpu_motherboard_socket",
            "cpu_memory_type",
            "cpu_power_budget",
        ]

    def test_case_rule_order(self):
        case = _make("Case", "NR200P", {
            "supportedFormFactors": ["Mini-ITX"],
            "maxGpuLength": 330,
            "maxCoolerHeight": 155,
        })
        config = _config(
            _make("Motherboard", "X670E-E", {"formFactor": "ATX"}),
            _make("GPU", "RTX 4080", {"length": 348}),
            _make("Cooler", "NH-D15", {"height": 165}),
        )
        assert [v.rule for v in check_component(case, config)] == [
            "case_motherboard_form_factor",
            "case_gpu_length",
            "case_cooler_height",
        ]

    def test_own_slot_is_ignored(self):
        """A CPU candidate never checks against the CPU already installed."""
        installed = _make("CPU", "Installed", {"socket": "LGA1700"})
        candidate = _make("CPU", "Candidate", {"socket": "AM5"})
        assert evaluate(candidate, _config(installed)) == []

    def test_idempotent(self):
        cpu = _make("CPU", "Ryzen 5 7600", {"socket": "AM5", "powerDraw": 65})
        config = _config(
            _make("Motherboard", "B760M", {"socket": "LGA1700"}),
            _make("PSU", "CX400", {"wattage": 100}),
        )
        first = evaluate(cpu, config)
        assert first
        for _ in range(5):
            assert evaluate(cpu, config) == first

    def test_does_not_mutate_configuration(self):
        config = _config(_make("Motherboard", "B760M", {"socket": "LGA1700"}))
        before = config.signature()
        evaluate(_make("CPU", "Ryzen", {"socket": "AM5"}), config)
        assert config.signature() == before

    @pytest.mark.parametrize(
        "cpu_socket,mobo_socket,conflict",
        [("AM5", "AM5", False), ("AM5", "AM4", True), ("LGA1700", "AM5", True)],
    )
    def test_socket_mirror_consistency(self, cpu_socket, mobo_socket, conflict):
        cpu = _make("CPU", "P", {"socket": cpu_socket})
        mobo = _make("Motherboard", "M", {"socket": mobo_socket})
        cpu_rules = [v.rule for v in check_component(cpu, _config(mobo))]
        mobo_rules = [v.rule for v in check_component(mobo, _config(cpu))]
        assert ("cpu_motherboard_socket" in cpu_rules) is conflict
        assert ("motherboard_cpu_socket" in mobo_rules) is conflict
