"""Test SQLAlchemy repository implementations."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from provisioning_engine.core.errors import EggAlreadyExists, PersistenceError, ServerNotFound
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.models import ServerState
from provisioning_engine.core.models import UserLevel
from provisioning_engine.core.validation import VariableValidator
from provisioning_engine.domain.eggs import PAPER_EGG
from provisioning_engine.infrastructure.postgres.repository import SqlServerRepository


@pytest.fixture
def validated(egg_repository, paper_egg):
    return VariableValidator(egg_repository).set_user_level(UserLevel.ADMIN).validate(
        paper_egg.id, {"SERVER_JARFILE": "paper.jar"}
    )


class CountingUuidGenerator(UuidGenerator):
    """Counts how many transactions asked for an identifier."""

    def __init__(self, repository):
        super().__init__(repository)
        self.calls = 0

    def generate(self, in_use=None):
        self.calls += 1
        return super().generate(in_use=in_use)


@pytest.fixture
def create_data(node, paper_egg):
    return {
        "name": "Survival",
        "node_id": node.id,
        "egg_id": paper_egg.id,
        "ports": ["25565"],
        "startup": paper_egg.startup,
        "image": paper_egg.default_image,
    }


class TestSqlServerRepository:
    """Test repository operations."""

    # -------------------------
    # CREATE TESTS
    # -------------------------

    def test_create_with_variables(self, server_repository, create_data, validated):
        server = server_repository.create_with_variables(
            create_data, validated, UuidGenerator(server_repository)
        )

        assert server.id is not None
        assert server.status == ServerState.INSTALLING
        assert server.uuid_short == server.uuid[:8]
        assert server.ports == ["25565"]

        variables = server_repository.list_variables(server.id)
        assert len(variables) == len(validated)
        assert {v.variable_value for v in variables} >= {"paper.jar", ""}
        assert len({v.created_at for v in variables}) == 1

    def test_defaults_applied(self, server_repository, create_data):
        server = server_repository.create_with_variables(
            create_data, [], UuidGenerator(server_repository)
        )

        assert server.io == 500
        assert server.oom_killer is False
        assert server.skip_scripts is False
        assert server.docker_labels == {}

    def test_retries_then_raises_persistence_error(
        self, server_repository, create_data, monkeypatch
    ):
        calls = []

        def always_locked(session, data, variables, uuid_generator):
            calls.append(1)
            raise OperationalError("INSERT INTO servers", {}, Exception("database is locked"))

        monkeypatch.setattr(server_repository, "_create_in_session", always_locked)

        with pytest.raises(PersistenceError):
            server_repository.create_with_variables(
                create_data, [], UuidGenerator(server_repository)
            )

        assert len(calls) == 5
        assert server_repository.count() == 0

    def test_recovers_after_transient_failure(
        self, test_session_factory, create_data, monkeypatch
    ):
        repository = SqlServerRepository(session_factory=test_session_factory, max_attempts=3)
        original = repository._create_in_session
        calls = []

        def flaky(session, data, variables, uuid_generator):
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("INSERT INTO servers", {}, Exception("serialization failure"))
            return original(session, data, variables, uuid_generator)

        monkeypatch.setattr(repository, "_create_in_session", flaky)

        server = repository.create_with_variables(create_data, [], UuidGenerator(repository))

        assert len(calls) == 2
        assert repository.get(server.uuid) is not None

    def test_duplicate_external_id_fails_without_retry(self, server_repository, create_data):
        server_repository.create_with_variables(
            {**create_data, "external_id": "dup"}, [], UuidGenerator(server_repository)
        )
        generator = CountingUuidGenerator(server_repository)

        with pytest.raises(PersistenceError):
            server_repository.create_with_variables(
                {**create_data, "external_id": "dup"}, [], generator
            )

        assert generator.calls == 1
        assert server_repository.count() == 1

    def test_unknown_node_fails_without_retry(self, server_repository, create_data):
        generator = CountingUuidGenerator(server_repository)

        with pytest.raises(PersistenceError):
            server_repository.create_with_variables(
                {**create_data, "node_id": 999}, [], generator
            )

        assert generator.calls == 1
        assert server_repository.count() == 0

    def test_identifier_collision_is_retried(self, server_repository, create_data, monkeypatch):
        original = server_repository._create_in_session
        calls = []

        def collide_once(session, data, variables, uuid_generator):
            calls.append(1)
            if len(calls) == 1:
                raise IntegrityError(
                    "INSERT INTO servers", {},
                    Exception("UNIQUE constraint failed: servers.uuid_short"),
                )
            return original(session, data, variables, uuid_generator)

        monkeypatch.setattr(server_repository, "_create_in_session", collide_once)

        server = server_repository.create_with_variables(
            create_data, [], UuidGenerator(server_repository)
        )

        assert len(calls) == 2
        assert server_repository.get(server.uuid) is not None

    def test_failure_leaves_no_partial_rows(
        self, server_repository, create_data, validated, monkeypatch
    ):
        original = server_repository._create_in_session

        def fail_after_insert(session, data, variables, uuid_generator):
            original(session, data, variables, uuid_generator)
            raise OperationalError("INSERT INTO server_variables", {}, Exception("deadlock"))

        monkeypatch.setattr(server_repository, "_create_in_session", fail_after_insert)

        with pytest.raises(PersistenceError):
            server_repository.create_with_variables(
                create_data, validated, UuidGenerator(server_repository)
            )

        assert server_repository.count() == 0

    # -------------------------
    # READ TESTS
    # -------------------------

    def test_get_by_full_and_short_uuid(self, server_repository, create_data):
        server = server_repository.create_with_variables(
            create_data, [], UuidGenerator(server_repository)
        )

        assert server_repository.get(server.uuid).id == server.id
        assert server_repository.get(server.uuid_short).id == server.id
        assert server_repository.get_by_id(server.id).uuid == server.uuid

    def test_get_nonexistent(self, server_repository):
        assert server_repository.get("deadbeef") is None
        assert server_repository.get_by_id(42) is None

    def test_uuid_in_use(self, server_repository, create_data):
        server = server_repository.create_with_variables(
            create_data, [], UuidGenerator(server_repository)
        )

        assert server_repository.uuid_in_use(server.uuid, "zzzzzzzz")
        assert server_repository.uuid_in_use("other", server.uuid_short)
        assert not server_repository.uuid_in_use("other", "zzzzzzzz")

    # -------------------------
    # UPDATE TESTS
    # -------------------------

    def test_update_existing_variable(self, server_repository, create_data, validated):
        server = server_repository.create_with_variables(
            create_data, validated, UuidGenerator(server_repository)
        )
        jar = next(v for v in validated if v.key == "SERVER_JARFILE")

        updated = server_repository.update_variable(server.id, jar.variable_id, "custom.jar")

        assert updated.variable_value == "custom.jar"
        values = {v.variable_id: v.variable_value for v in server_repository.list_variables(server.id)}
        assert values[jar.variable_id] == "custom.jar"
        assert len(values) == len(validated)

    def test_update_inserts_missing_variable(self, server_repository, create_data, paper_egg):
        server = server_repository.create_with_variables(
            create_data, [], UuidGenerator(server_repository)
        )

        server_repository.update_variable(server.id, paper_egg.variables[0].id, "1.20.4")

        variables = server_repository.list_variables(server.id)
        assert [v.variable_value for v in variables] == ["1.20.4"]

    def test_update_unknown_server(self, server_repository, paper_egg):
        with pytest.raises(ServerNotFound):
            server_repository.update_variable(999, paper_egg.variables[0].id, "x")

    # -------------------------
    # DELETE TESTS
    # -------------------------

    def test_delete_removes_server_and_variables(self, server_repository, create_data, validated):
        server = server_repository.create_with_variables(
            create_data, validated, UuidGenerator(server_repository)
        )

        assert server_repository.delete(server.id) is True
        assert server_repository.get(server.uuid) is None
        assert server_repository.list_variables(server.id) == []

    def test_delete_missing_returns_false(self, server_repository):
        assert server_repository.delete(999) is False


class TestSqlEggRepository:

    def test_create_and_get_preserves_order(self, egg_repository, paper_egg):
        egg = egg_repository.get(paper_egg.id)

        assert egg.name == "Paper"
        assert [v.env_variable for v in egg.ordered_variables()] == [
            "MINECRAFT_VERSION", "SERVER_JARFILE", "BUILD_NUMBER", "DL_PATH",
        ]
        assert egg.default_image == "ghcr.io/parkervcp/yolks:java_21"

    def test_get_missing(self, egg_repository):
        assert egg_repository.get(404) is None

    def test_duplicate_uuid(self, egg_repository, paper_egg):
        from dataclasses import replace

        with pytest.raises(EggAlreadyExists):
            egg_repository.create(replace(PAPER_EGG, uuid=paper_egg.uuid))


class TestSqlNodeRepository:

    def test_create_and_get(self, node_repository, node):
        stored = node_repository.get(node.id)

        assert stored.fqdn == "node1.example.com"
        assert stored.daemon_url == "https://node1.example.com:8080"

    def test_duplicate_name(self, node_repository, node):
        from dataclasses import replace

        with pytest.raises(PersistenceError):
            node_repository.create(replace(node, id=None))
