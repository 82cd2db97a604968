"""Tests for env_validation module (orchestrator with an in-memory provider)."""

import re
from pathlib import Path

import pytest
from unittest.mock import MagicMock

import envguard.core.env_validation as env_validation_module
from envguard.core.config import Config
from envguard.core.contracts import (
    EnvValidationHook, ValidateAfterPayload, ValidateBeforePayload,
)
from envguard.core.env_validation import (
    EnvValidation, ValidationState, get_env_validation, reset_env_validation,
)
from envguard.core.errors import (
    FilesystemError, ReentrantValidationError, ValidationError,
)
from envguard.core.hooks import HookRegistry
from tests.fixtures.fakes import FakeSchema, InMemorySchemaProvider, RecordingObserver


class TestConstruction:
    """Defaults and fluent configuration."""

    def test_default_paths_and_filter(self):
        validation = EnvValidation()
        module_dir = Path(env_validation_module.__file__).resolve().parent

        assert validation.resolution_paths == [str(module_dir), str(module_dir.parent)]
        assert [f.pattern for f in validation.config_file_filters] == [r"\.config\.py$"]

    def test_defaults_can_be_skipped(self):
        validation = EnvValidation(use_default_paths=False, use_default_filters=False)
        assert validation.resolution_paths == []
        assert validation.config_file_filters == []

    def test_mutators_chain(self):
        validation = EnvValidation()
        result = (
            validation
            .clear_resolution_paths()
            .add_resolution_path("/a")
            .add_resolution_paths(["/b", "/c"])
            .remove_resolution_path("/b")
            .clear_config_file_filters()
            .add_config_file_filter(r"\.env\.py$")
            .add_config_file_filters([r"a$", r"b$"])
            .remove_config_file_filter(re.compile(r"a$"))
        )

        assert result is validation
        assert validation.resolution_paths == ["/a", "/c"]
        assert [f.pattern for f in validation.config_file_filters] == [r"\.env\.py$", r"b$"]

    def test_passes_config_file_filters(self):
        validation = EnvValidation().clear_config_file_filters().add_config_file_filter(r"\.config\.(py|pyc)$")

        assert validation.passes_config_file_filters("db.config.py")
        assert not validation.passes_config_file_filters("readme.md")

    def test_accessors_return_copies(self):
        validation = EnvValidation()
        validation.resolution_paths.clear()
        validation.config_file_filters.clear()
        assert len(validation.resolution_paths) == 2
        assert len(validation.config_file_filters) == 1

    def test_from_config(self, tmp_path):
        config = Config(
            resolution_paths=[str(tmp_path)],
            config_file_filters=[r"\.env\.py$"],
            use_default_paths=False,
            isolate_hook_errors=True,
            hook_history=10,
            schema_export="env_schema",
        )
        validation = EnvValidation.from_config(config)

        assert validation.resolution_paths == [str(tmp_path)]
        assert [f.pattern for f in validation.config_file_filters] == [r"\.config\.py$", r"\.env\.py$"]
        assert validation.hooks.isolate_errors is True
        assert validation._resolver.provider.schema_export == "env_schema"


class TestValidate:
    """validate() with fake schemas."""

    def setup_method(self):
        self.root = Path("/virtual/config").resolve()
        self.db = FakeSchema("db", required=["DB_PORT"])
        self.auth = FakeSchema("auth", required=["JWT_SECRET"])
        self.cache = FakeSchema("cache", required=["REDIS_URL"])
        self.provider = InMemorySchemaProvider({str(self.root): {
            "1-db.config.py": self.db,
            "2-auth.config.py": self.auth,
            "3-cache.config.py": self.cache,
            "4-none.config.py": None,
            "notes.txt": FakeSchema("never"),
        }})
        self.validation = EnvValidation(provider=self.provider, use_default_paths=False)
        self.validation.add_resolution_path(self.root)
        self.observer = RecordingObserver(self.validation)

    def test_success_returns_same_object(self):
        env = {"DB_PORT": "5432", "JWT_SECRET": "x", "REDIS_URL": "redis://", "EXTRA": "1"}

        assert self.validation.validate(env) is env
        assert env == {"DB_PORT": "5432", "JWT_SECRET": "x", "REDIS_URL": "redis://", "EXTRA": "1"}
        assert self.validation.state == ValidationState.COMPLETED

    def test_hook_sequence_on_success(self):
        self.validation.validate({"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"})

        assert self.observer.names() == [
            "validate_before",
            "configuration_resolved_files",
            "configuration_loaded_schemas",
            "validate_schema", "validate_schema", "validate_schema",
            "validate_after",
        ]
        checked = self.observer.payloads("validate_schema")
        assert [p.schema for p in checked] == [self.db, self.auth, self.cache]
        assert all(p.error is None for p in checked)

    def test_payloads_carry_the_same_env(self):
        env = {"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"}
        self.validation.validate(env)

        assert isinstance(self.observer.payloads("validate_before")[0], ValidateBeforePayload)
        assert self.observer.payloads("validate_before")[0].config is env
        assert isinstance(self.observer.payloads("validate_after")[0], ValidateAfterPayload)
        assert self.observer.payloads("validate_after")[0].config is env
        assert all(p.config is env for p in self.observer.payloads("validate_schema"))

    def test_first_failure_stops_evaluation(self):
        env = {"DB_PORT": 1, "REDIS_URL": "r"}

        with pytest.raises(ValidationError) as exc_info:
            self.validation.validate(env)

        checked = self.observer.payloads("validate_schema")
        assert len(checked) == 2
        assert checked[0].error is None
        assert checked[1].schema is self.auth
        assert checked[1].error.message == "JWT_SECRET is required"
        assert self.cache.calls == []
        assert "validate_after" not in self.observer.names()
        assert self.validation.state == ValidationState.FAILED

        error = exc_info.value
        assert error.schema is self.auth
        assert error.message == "JWT_SECRET is required"
        assert error.source == self.root / "2-auth.config.py"
        assert str(error) == "Config validation error: auth (2-auth.config.py): JWT_SECRET is required"

    @pytest.mark.parametrize("missing,expected_checks", [
        ("DB_PORT", 1), ("JWT_SECRET", 2), ("REDIS_URL", 3),
    ])
    def test_exactly_k_schema_hooks_for_kth_failure(self, missing, expected_checks):
        env = {"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"}
        del env[missing]

        with pytest.raises(ValidationError):
            self.validation.validate(env)

        checked = self.observer.payloads("validate_schema")
        assert len(checked) == expected_checks
        assert checked[-1].error is not None
        assert all(p.error is None for p in checked[:-1])

    def test_non_matching_file_never_loaded(self):
        self.validation.validate({"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"})

        assert self.root / "notes.txt" not in self.provider.loaded
        files = self.observer.payloads("configuration_resolved_files")[0].files
        assert "notes.txt" not in files

    def test_module_without_schema_contributes_nothing(self):
        self.validation.validate({"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"})

        assert self.observer.payloads("configuration_loaded_schemas")[0].schemas == [
            self.db, self.auth, self.cache,
        ]

    def test_idempotent_outcome(self):
        env = {"DB_PORT": 1, "REDIS_URL": "r"}
        failures = []
        for _ in range(2):
            with pytest.raises(ValidationError) as exc_info:
                self.validation.validate(env)
            failures.append(exc_info.value.schema)

        assert failures == [self.auth, self.auth]

    def test_schemas_called_with_unknown_key_tolerance(self):
        schema = MagicMock()
        schema.validate.return_value = {"error": None}
        provider = InMemorySchemaProvider({str(self.root): {"m.config.py": schema}})
        validation = EnvValidation(provider=provider, use_default_paths=False).add_resolution_path(self.root)
        env = {"A": "1"}

        validation.validate(env)

        schema.validate.assert_called_once_with(env, allow_unknown=True)

    def test_dict_style_errors_are_understood(self):
        schema = MagicMock()
        schema.name = "dict-schema"
        schema.validate.return_value = {"error": "A must be set"}
        provider = InMemorySchemaProvider({str(self.root): {"m.config.py": schema}})
        validation = EnvValidation(provider=provider, use_default_paths=False).add_resolution_path(self.root)

        with pytest.raises(ValidationError, match="A must be set"):
            validation.validate({})

    def test_no_schemas_is_success(self):
        validation = EnvValidation(provider=InMemorySchemaProvider({}), use_default_paths=False)
        after = MagicMock()
        validation.on("validate_after", after)

        assert validation.validate({}) == {}
        after.assert_called_once()

    def test_filesystem_error_propagates(self):
        self.validation.add_resolution_path("/virtual/missing")

        with pytest.raises(FilesystemError):
            self.validation.validate({"DB_PORT": 1, "JWT_SECRET": "x", "REDIS_URL": "r"})

        assert "validate_schema" not in self.observer.names()
        assert self.validation.state == ValidationState.FAILED

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            self.validation.validate(["DB_PORT"])


class TestHooksIntegration:
    """Hook behaviour driven through the orchestrator."""

    def setup_method(self):
        self.root = Path("/virtual/hooks").resolve()
        self.schema = FakeSchema("db", required=["DB_PORT"])
        self.provider = InMemorySchemaProvider({str(self.root): {"db.config.py": self.schema}})

    def _validation(self, hooks=None):
        return EnvValidation(hooks=hooks, provider=self.provider, use_default_paths=False) \
            .add_resolution_path(self.root)

    def test_throwing_observer_aborts_validation(self):
        validation = self._validation()
        validation.on(EnvValidationHook.VALIDATE_BEFORE, MagicMock(side_effect=RuntimeError("audit down")))

        with pytest.raises(RuntimeError, match="audit down"):
            validation.validate({"DB_PORT": 1})

        assert self.schema.calls == []
        assert validation.state == ValidationState.FAILED

    def test_isolated_observer_errors_do_not_abort(self):
        validation = self._validation(HookRegistry(isolate_errors=True))
        validation.on("validate_schema", MagicMock(side_effect=RuntimeError("audit down")))

        env = {"DB_PORT": 1}
        assert validation.validate(env) is env

    def test_reentrant_validate_rejected(self):
        validation = self._validation()

        def reenter(payload):
            validation.validate(payload.config)

        validation.on("validate_before", reenter)

        with pytest.raises(ReentrantValidationError):
            validation.validate({"DB_PORT": 1})

        # the guard is released once the outer call is over
        validation.off("validate_before", reenter)
        assert validation.validate({"DB_PORT": 1}) == {"DB_PORT": 1}

    def test_reentrant_resolve_rejected(self):
        validation = self._validation()
        validation.on("configuration_loaded_schemas", lambda payload: validation.resolve_schemas())

        with pytest.raises(ReentrantValidationError):
            validation.validate({"DB_PORT": 1})

    def test_other_instance_may_be_used_from_hook(self):
        inner = self._validation()
        outer = self._validation()
        results = []
        outer.on("validate_after", lambda payload: results.append(inner.validate(payload.config)))

        outer.validate({"DB_PORT": 1})

        assert results == [{"DB_PORT": 1}]

    def test_off_detaches_callback(self):
        validation = self._validation()
        handler = MagicMock()
        validation.on("validate_after", handler).off("validate_after", handler)

        validation.validate({"DB_PORT": 1})

        handler.assert_not_called()

    def test_unknown_hook_name_rejected(self):
        with pytest.raises(ValueError):
            self._validation().on("validate_whenever", MagicMock())

    def test_resolve_schemas_fires_discovery_hooks_only(self):
        validation = self._validation()
        observer = RecordingObserver(validation)

        discovered = validation.resolve_schemas()

        assert [d.schema for d in discovered] == [self.schema]
        assert observer.names() == ["configuration_resolved_files", "configuration_loaded_schemas"]


class TestGlobalInstance:
    def test_get_env_validation_is_cached(self):
        first = get_env_validation()
        assert get_env_validation() is first

    def test_reset(self):
        first = get_env_validation()
        reset_env_validation()
        assert get_env_validation() is not first

    def test_environment_settings_applied(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVGUARD_PATHS", str(tmp_path))
        monkeypatch.setenv("ENVGUARD_ISOLATE_HOOK_ERRORS", "true")

        validation = get_env_validation()

        assert validation.resolution_paths[-1] == str(tmp_path)
        assert validation.hooks.isolate_errors is True

    def test_malformed_setting_does_not_break_accessor(self, monkeypatch, caplog):
        monkeypatch.setenv("ENVGUARD_HOOK_HISTORY", "ten")

        validation = get_env_validation()

        assert validation.hooks._max_history == 0
        assert "ENVGUARD_HOOK_HISTORY" in caplog.text


class TestValidationErrorMessage:
    """ValidationError keeps the raw schema message apart from its origin."""

    def test_message_is_raw_and_str_names_origin(self):
        schema = FakeSchema("db")
        error = ValidationError("DB_PORT is required", schema=schema, source=Path("/cfg/db.config.py"))

        assert error.message == "DB_PORT is required"
        assert str(error) == "Config validation error: db (db.config.py): DB_PORT is required"

    def test_without_origin(self):
        error = ValidationError("A: Field required")
        assert str(error) == "Config validation error: A: Field required"
