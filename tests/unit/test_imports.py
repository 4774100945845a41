"""
Import validation tests.

These tests ensure all modules can be imported successfully, catching
issues like missing dependencies or circular imports BEFORE deployment.

Run with: pytest tests/unit/test_imports.py -v
"""

import importlib
import sys
from pathlib import Path

import pytest


# Add src to path to simulate Lambda environment
SRC_PATH = Path(__file__).parent.parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class TestHandlerImports:
    """Verify all handler modules can be imported without errors."""

    @pytest.mark.parametrize("module_name", [
        "handlers.main",
        "handlers.health_check",
        "handlers.auth",
        "handlers.dashboard",
        "handlers.analytics",
        "handlers.customers",
        "handlers.segments",
        "handlers.ai_insights",
        "handlers.risk_assessment",
    ])
    def test_handler_import(self, module_name: str):
        """Each handler module should import without errors."""
        try:
            module = importlib.import_module(module_name)
            assert hasattr(module, "lambda_handler"), f"{module_name} missing lambda_handler"
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestServiceImports:
    """Verify all service modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "services.ai_service",
        "services.auth_service",
        "services.scoring",
        "services.segmentation",
        "services.ml_engine",
        "services.data_seeder",
        "services.customer_service",
        "services.segmentation_service",
        "services.risk_service",
        "services.insight_service",
        "services.analytics_service",
    ])
    def test_service_import(self, module_name: str):
        """Each service module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestModelImports:
    """Verify all model modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "models",
        "models.analytics",
        "models.auth",
        "models.customer",
        "models.insight",
        "models.risk",
        "models.segment",
    ])
    def test_model_import(self, module_name: str):
        """Each model module should import without errors."""
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestRepositoryAndUtilImports:
    """Verify repository and utility modules can be imported."""

    @pytest.mark.parametrize("module_name", [
        "repositories.tables",
        "repositories.collection_repo",
        "repositories.database",
        "utils.logging_config",
        "utils.cache_service",
        "utils.error_handling",
        "utils.validators",
        "utils.settings",
        "utils.http",
    ])
    def test_import(self, module_name: str):
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            pytest.fail(f"Failed to import {module_name}: {e}")


class TestNoSrcPrefix:
    """Ensure no modules use 'from src.' imports (breaks in Lambda)."""

    @pytest.mark.parametrize("package", ["handlers", "services", "models", "repositories", "utils"])
    def test_no_src_prefix(self, package: str):
        for py_file in (SRC_PATH / package).glob("*.py"):
            content = py_file.read_text()
            assert "from src." not in content, f"{py_file.name} contains 'from src.' import"
            assert "import src." not in content, f"{py_file.name} contains 'import src.' import"
