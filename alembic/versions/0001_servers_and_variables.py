"""servers, eggs and server variables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


SERVER_STATE = sa.Enum(
    "INSTALLING", "INSTALL_FAILED", "REINSTALL_FAILED", "SUSPENDED", "RESTORING_BACKUP",
    name="server_state",
)


def upgrade() -> None:
    op.create_table(
        "nodes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("fqdn", sa.String(255), nullable=False),
        sa.Column("scheme", sa.String(10), nullable=False),
        sa.Column("daemon_listen", sa.Integer(), nullable=False),
        sa.Column("daemon_token", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "eggs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(36), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("docker_images", sa.JSON(), nullable=False),
        sa.Column("startup", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "egg_variables",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("egg_id", sa.Integer(), sa.ForeignKey("eggs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sort", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("env_variable", sa.String(255), nullable=False),
        sa.Column("default_value", sa.Text(), nullable=True),
        sa.Column("user_viewable", sa.Boolean(), nullable=False),
        sa.Column("user_editable", sa.Boolean(), nullable=False),
        sa.Column("rules", sa.Text(), nullable=False),
        sa.UniqueConstraint("egg_id", "env_variable", name="uq_egg_variables_egg_env"),
    )

    op.create_table(
        "servers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(36), nullable=False),
        sa.Column("uuid_short", sa.String(8), nullable=False),
        sa.Column("external_id", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("node_id", sa.Integer(), sa.ForeignKey("nodes.id"), nullable=False),
        sa.Column("egg_id", sa.Integer(), sa.ForeignKey("eggs.id"), nullable=False),
        sa.Column("status", SERVER_STATE, nullable=True),
        sa.Column("skip_scripts", sa.Boolean(), nullable=False),
        sa.Column("memory", sa.Integer(), nullable=False),
        sa.Column("swap", sa.Integer(), nullable=False),
        sa.Column("disk", sa.Integer(), nullable=False),
        sa.Column("io", sa.Integer(), nullable=False),
        sa.Column("cpu", sa.Integer(), nullable=False),
        sa.Column("threads", sa.String(255), nullable=True),
        sa.Column("oom_killer", sa.Boolean(), nullable=False),
        sa.Column("ports", sa.JSON(), nullable=False),
        sa.Column("startup", sa.Text(), nullable=False),
        sa.Column("image", sa.String(255), nullable=False),
        sa.Column("database_limit", sa.Integer(), nullable=False),
        sa.Column("allocation_limit", sa.Integer(), nullable=False),
        sa.Column("backup_limit", sa.Integer(), nullable=False),
        sa.Column("docker_labels", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("uuid", name="uq_servers_uuid"),
        sa.UniqueConstraint("uuid_short", name="uq_servers_uuid_short"),
        sa.UniqueConstraint("external_id", name="uq_servers_external_id"),
    )
    op.create_index("ix_servers_owner_id", "servers", ["owner_id"])
    op.create_index("ix_servers_node_id", "servers", ["node_id"])
    op.create_index("ix_servers_node_status", "servers", ["node_id", "status"])

    op.create_table(
        "server_variables",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("server_id", sa.Integer(), sa.ForeignKey("servers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("variable_id", sa.Integer(), sa.ForeignKey("egg_variables.id", ondelete="CASCADE"), nullable=False),
        sa.Column("variable_value", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("server_id", "variable_id", name="uq_server_variables_server_variable"),
    )


def downgrade() -> None:
    op.drop_table("server_variables")
    op.drop_index("ix_servers_node_status", table_name="servers")
    op.drop_index("ix_servers_node_id", table_name="servers")
    op.drop_index("ix_servers_owner_id", table_name="servers")
    op.drop_table("servers")
    SERVER_STATE.drop(op.get_bind(), checkfirst=True)
    op.drop_table("egg_variables")
    op.drop_table("eggs")
    op.drop_table("nodes")
