"""Test factories for generating test data."""

from polyfactory import Use
from polyfactory.factories import DataclassFactory
from polyfactory.factories.pydantic_factory import ModelFactory

from toolchain_e2e.models.definition import CaseDefinition, SuiteDefinition
from toolchain_e2e.models.result import TestOutcome


class TestOutcomeFactory(DataclassFactory[TestOutcome]):
    """Factory for TestOutcome."""

    __model__ = TestOutcome

    success = True
    detail = None
    cleanup_error = None


class CaseDefinitionFactory(ModelFactory[CaseDefinition]):
    """Factory for CaseDefinition."""

    stdin = ""


class SuiteDefinitionFactory(ModelFactory[SuiteDefinition]):
    """Factory for SuiteDefinition."""

    version = "1.0"
    cases = Use(list[CaseDefinition])
