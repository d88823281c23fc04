"""Initial storefront schema, role logins and row-level security

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17

On PostgreSQL this also creates one login role per application role
(admin_user, analyst_user, moderator_user, support_user, normal_user),
grants each one what its pool needs and turns on row-level security for
customer-owned tables. Policies read the transaction-local setting
app.current_user_id written by the data access layer.
"""

from alembic import op
import sqlalchemy as sa
from flask import current_app


# revision identifiers, used by Alembic.
revision = "20261017_initial"
down_revision = None
branch_labels = None
depends_on = None


ACTING_USER = "NULLIF(current_setting('app.current_user_id', true), '')::int"

RLS_TABLES = ("sales", "reviews", "support_requests", "support_messages")
ALL_TABLES = (
    "users", "positions", "employees", "categories", "providers", "apps",
    "sales", "reviews", "support_requests", "support_messages",
)
CATALOG_TABLES = ("categories", "providers", "apps")


def _create_tables():
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("reg_date", sa.Date(), server_default=sa.func.current_date(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "positions",
        sa.Column("position_id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=120), nullable=False, unique=True),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "employees",
        sa.Column("employee_id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("position_id", sa.Integer(), sa.ForeignKey("positions.position_id"), nullable=True),
        sa.Column("hire_date", sa.Date(), server_default=sa.func.current_date(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_employees_username", "employees", ["username"], unique=True)

    op.create_table(
        "categories",
        sa.Column("category_id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=120), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "providers",
        sa.Column("provider_id", sa.Integer(), primary_key=True),
        sa.Column("provider_name", sa.String(length=200), nullable=False),
        sa.Column("provider_type", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("country", sa.String(length=120), nullable=True),
        sa.Column("founded_date", sa.Date(), nullable=True),
        sa.Column("web", sa.String(length=255), nullable=True),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "apps",
        sa.Column("app_id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cost_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.category_id"), nullable=True),
        sa.Column("provider_id", sa.Integer(), sa.ForeignKey("providers.provider_id"), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_apps_category_id", "apps", ["category_id"])
    op.create_index("ix_apps_provider_id", "apps", ["provider_id"])
    op.create_index("ix_apps_release_title", "apps", ["release_date", "title"])

    op.create_table(
        "sales",
        sa.Column("sale_id", sa.Integer(), primary_key=True),
        sa.Column("sale_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("app_id", sa.Integer(), sa.ForeignKey("apps.app_id"), nullable=False),
        sa.CheckConstraint(
            "status IN ('CREATED', 'PROCESSING', 'COMPLETED', 'CANCELLED')", name="ck_sales_status",
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sales_status_date", "sales", ["status", "sale_date"])
    op.create_index("ix_sales_user_app", "sales", ["user_id", "app_id"])

    op.create_table(
        "reviews",
        sa.Column("review_id", sa.Integer(), primary_key=True),
        sa.Column("app_id", sa.Integer(), sa.ForeignKey("apps.app_id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("evaluation", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("review_date", sa.Date(), server_default=sa.func.current_date(), nullable=False),
        sa.Column("moderated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "moderator_id", sa.Integer(),
            sa.ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True,
        ),
        sa.CheckConstraint("status IN ('PENDING', 'APPROVED', 'REJECTED')", name="ck_reviews_status"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_reviews_app_status", "reviews", ["app_id", "status"])
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])

    op.create_table(
        "support_requests",
        sa.Column("request_id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject", sa.String(length=120), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "employee_id", sa.Integer(),
            sa.ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("taken_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("sales.sale_id", ondelete="SET NULL"), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("priority IN ('low', 'normal', 'high')", name="ck_support_requests_priority"),
        sa.CheckConstraint(
            "status IN ('CREATED', 'PROCESSING', 'COMPLETED')", name="ck_support_requests_status",
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_support_requests_user_id", "support_requests", ["user_id"])
    op.create_index("ix_support_requests_status_created", "support_requests", ["status", "created_at"])

    op.create_table(
        "support_messages",
        sa.Column("message_id", sa.Integer(), primary_key=True),
        sa.Column(
            "request_id", sa.Integer(),
            sa.ForeignKey("support_requests.request_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("sender_type", sa.String(length=16), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("sender_type IN ('user', 'employee')", name="ck_support_messages_sender_type"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_support_messages_request_id", "support_messages", ["request_id"])


def _create_login_roles():
    users = current_app.config["ROLE_DB_USERS"]
    passwords = current_app.config["ROLE_DB_PASSWORDS"]
    for role, login in users.items():
        password = passwords[role].replace("'", "''")
        op.execute(f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT FROM pg_roles WHERE rolname = '{login}') THEN
                    CREATE ROLE {login} LOGIN PASSWORD '{password}';
                END IF;
            END
            $$;
        """)
    return users


def _grant(users):
    admin, analyst = users["admin"], users["analyst"]
    moderator, support, customer = users["moderator"], users["support"], users["user"]
    everyone = ", ".join(users.values())
    tables = ", ".join(ALL_TABLES)

    op.execute(f"GRANT USAGE ON SCHEMA public TO {everyone}")
    op.execute(f"GRANT USAGE, SELECT ON ALL SEQUENCES IN SCHEMA public TO {everyone}")

    op.execute(f"GRANT SELECT, INSERT, UPDATE, DELETE ON {tables} TO {admin}")
    op.execute(f"GRANT SELECT ON {tables} TO {analyst}, {moderator}, {support}")
    op.execute(f"GRANT UPDATE ON reviews TO {moderator}")
    op.execute(f"GRANT INSERT, UPDATE ON support_requests TO {support}")
    op.execute(f"GRANT INSERT ON support_messages TO {support}")

    op.execute(f"GRANT SELECT ON {', '.join(CATALOG_TABLES)}, positions TO {customer}")
    op.execute(f"GRANT SELECT, UPDATE ON users TO {customer}")
    op.execute(f"GRANT SELECT (employee_id, username) ON employees TO {customer}")
    op.execute(f"GRANT SELECT, INSERT, UPDATE ON sales TO {customer}")
    op.execute(f"GRANT SELECT, INSERT ON reviews, support_requests, support_messages TO {customer}")


def _enable_row_security(users):
    customer = users["user"]
    staff = ", ".join(users[r] for r in ("admin", "analyst", "moderator", "support"))

    for table in RLS_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"CREATE POLICY {table}_staff ON {table} TO {staff} USING (true) WITH CHECK (true)")

    op.execute(f"""
        CREATE POLICY sales_owner ON sales TO {customer}
        USING (user_id = {ACTING_USER}) WITH CHECK (user_id = {ACTING_USER})
    """)
    op.execute(f"""
        CREATE POLICY reviews_owner ON reviews TO {customer}
        USING (user_id = {ACTING_USER}) WITH CHECK (user_id = {ACTING_USER})
    """)
    op.execute(f"""
        CREATE POLICY reviews_published ON reviews FOR SELECT TO {customer}
        USING (status = 'APPROVED')
    """)
    op.execute(f"""
        CREATE POLICY support_requests_owner ON support_requests TO {customer}
        USING (user_id = {ACTING_USER}) WITH CHECK (user_id = {ACTING_USER})
    """)
    op.execute(f"""
        CREATE POLICY support_messages_owner ON support_messages TO {customer}
        USING (request_id IN (SELECT request_id FROM support_requests WHERE user_id = {ACTING_USER}))
        WITH CHECK (
            sender_type = 'user'
            AND sender_id = {ACTING_USER}
            AND request_id IN (SELECT request_id FROM support_requests WHERE user_id = {ACTING_USER})
        )
    """)


def upgrade():
    _create_tables()

    if op.get_bind().dialect.name != "postgresql":
        return

    users = _create_login_roles()
    _grant(users)
    _enable_row_security(users)


def downgrade():
    if op.get_bind().dialect.name == "postgresql":
        for table in RLS_TABLES:
            op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")

    for table in reversed(ALL_TABLES):
        op.drop_table(table)
