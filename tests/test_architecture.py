"""Architectural boundary tests using pytest-archon.

These tests verify that the codebase follows clean architecture principles:
- Domain layer has no dependencies on adapters
- Application services don't depend on adapters
- Adapters can depend on domain
- No circular dependencies
"""

from pytest_archon import archrule


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should not import any other modules except standard library and domain itself."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("odpt_departures.domain.models*")
        .should_not_import("odpt_departures.adapters*")
        .should_not_import("odpt_departures.application*")
        .should_not_import("odpt_departures.domain.contracts*")
        .should_not_import("odpt_departures.domain.ports*")
        .may_import("odpt_departures.domain.models*")
        .check("odpt_departures")
    )


def test_domain_contracts_have_no_dependencies() -> None:
    """Domain contracts (protocols/interfaces) should not import adapters or application."""
    (
        archrule("domain contracts", comment="Domain contracts should be independent")
        .match("odpt_departures.domain.contracts*")
        .should_not_import("odpt_departures.adapters*")
        .should_not_import("odpt_departures.application*")
        .may_import("odpt_departures.domain*")
        .check("odpt_departures")
    )


def test_domain_ports_have_no_dependencies() -> None:
    """Domain ports (interfaces) should not import adapters or application."""
    (
        archrule("domain ports", comment="Domain ports should be independent")
        .match("odpt_departures.domain.ports*")
        .should_not_import("odpt_departures.adapters*")
        .should_not_import("odpt_departures.application*")
        .may_import("odpt_departures.domain*")
        .check("odpt_departures")
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("odpt_departures.application*")
        .should_not_import("odpt_departures.adapters*")
        .should_not_import("aiohttp*")
        .may_import("odpt_departures.domain*")
        .may_import("odpt_departures.application*")
        .check("odpt_departures")
    )


def test_adapters_dont_import_application() -> None:
    """Adapters should not import application services (to avoid cycles)."""
    (
        archrule(
            "adapters independence", comment="Adapters should not depend on application services"
        )
        .match("odpt_departures.adapters*")
        .should_not_import("odpt_departures.application*")
        .may_import("odpt_departures.domain*")
        .may_import("odpt_departures.adapters*")
        .check("odpt_departures", only_direct_imports=True)
    )


def test_no_circular_dependencies_in_domain() -> None:
    """Domain layer should not have circular dependencies."""
    (
        archrule("domain no cycles", comment="Domain layer should not have circular dependencies")
        .match("odpt_departures.domain*")
        .should_not_import("odpt_departures.adapters*")
        .should_not_import("odpt_departures.application*")
        .may_import("odpt_departures.domain*")
        .check("odpt_departures", only_direct_imports=True)
    )


def test_cli_only_reaches_core_through_composition_root() -> None:
    """CLI should not wire ODPT adapters itself."""
    (
        archrule("CLI wiring", comment="CLI should use the composition root")
        .match("odpt_departures.cli")
        .should_not_import("odpt_departures.adapters.odpt_api*")
        .may_import("odpt_departures.main")
        .may_import("odpt_departures.domain*")
        .may_import("odpt_departures.adapters.config*")
        .check("odpt_departures", only_direct_imports=True)
    )
