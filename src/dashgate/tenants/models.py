"""SQLAlchemy models for tenants, their API keys, and dashboard grants."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashgate.common.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_code: Mapped[str] = mapped_column(String(100), nullable=False)

    api_keys: Mapped[list["ApiKeyModel"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApiKeyModel.id",
    )
    permissions: Mapped[list["DashboardPermissionModel"]] = relationship(
        back_populates="tenant",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DashboardPermissionModel.id",
    )


class ApiKeyModel(Base, TimestampMixin):
    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Argon2 PHC string, never the plaintext key
    key_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    tenant: Mapped[TenantModel] = relationship(back_populates="api_keys")

    def __repr__(self) -> str:
        return f"<ApiKeyModel id={self.id} tenant_id={self.tenant_id} active={self.is_active}>"


class DashboardPermissionModel(Base, TimestampMixin):
    __tablename__ = "tenant_dashboard_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    dashboard_uid: Mapped[str] = mapped_column(String(255), nullable=False)
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    tenant: Mapped[TenantModel] = relationship(back_populates="permissions")


# Case-insensitive uniqueness is enforced by the database, not only by the
# service-level pre-checks.
Index("uq_tenants_name_lower", func.lower(TenantModel.name), unique=True)
Index("uq_tenants_short_code_lower", func.lower(TenantModel.short_code), unique=True)
Index(
    "uq_permissions_tenant_dashboard_lower",
    DashboardPermissionModel.tenant_id,
    func.lower(DashboardPermissionModel.dashboard_uid),
    unique=True,
)
