import pytest
from pytest_archon import archrule

TRANSLATION_MODULES = [
    "mongo_transporter.escaping",
    "mongo_transporter.models",
    "mongo_transporter.filters",
    "mongo_transporter.aggregation",
    "mongo_transporter.pagination",
]


@pytest.mark.parametrize("module", TRANSLATION_MODULES)
def test_translation_is_driver_independent(module: str) -> None:
    """
    Escaping, filters, pipelines and pagination are pure translation.
    They must not reach the driver, so they stay testable without a store.
    """
    (
        archrule("translation_is_driver_independent")
        .match(module)
        .should_not_import("motor*")
        .should_not_import("pymongo*")
        .should_not_import("mongo_transporter.connection")
        .should_not_import("mongo_transporter.transporter")
        .check("mongo_transporter")
    )


def test_bulk_does_not_depend_on_reads() -> None:
    """
    Writes and reads are independent paths through the transporter.
    """
    (
        archrule("bulk_independent_of_retrieval")
        .match("mongo_transporter.bulk")
        .should_not_import("mongo_transporter.retrieval")
        .should_not_import("mongo_transporter.pagination")
        .check("mongo_transporter")
    )
