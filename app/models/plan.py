"""
Plan model for subscription tiers.

Plans are immutable reference data from the point of view of tenants: each
tenant points at a plan by its code and the plan's limits define the
resource ceilings enforced by the quota service. Limits and features are
stored as JSON text.
"""
from sqlalchemy import Column, String, Numeric, Boolean, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base
from app.utils.json_fields import safe_parse, dump_json


class Plan(Base):
    """
    Subscription plan definition.

    Represents a subscription tier (Trial, Starter, Standard, Premium) with
    pricing and resource limits. A limit of -1 means unlimited for users and
    clients.
    """
    __tablename__ = 'plans'

    id = Column(String(50), primary_key=True)  # Plan code, e.g. 'Trial'
    name = Column(String(100), nullable=False)

    # Pricing
    price_monthly = Column(Numeric(12, 2), nullable=False, default=0)
    price_yearly = Column(Numeric(12, 2), nullable=False, default=0)

    # JSON text columns
    features = Column(Text, nullable=False, default='[]')
    limits = Column(Text, nullable=False, default='{}')

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f'<Plan id={self.id} monthly={self.price_monthly}>'

    @property
    def limits_dict(self):
        """Return limits decoded from JSON (empty dict if corrupt)."""
        parsed = safe_parse(self.limits, {})
        return parsed if isinstance(parsed, dict) else {}

    @property
    def features_list(self):
        """Return features decoded from JSON (empty list if corrupt)."""
        parsed = safe_parse(self.features, [])
        return parsed if isinstance(parsed, list) else []

    def set_limits(self, limits):
        self.limits = dump_json(limits)

    def set_features(self, features):
        self.features = dump_json(features)

    def get_limit(self, key, default=None):
        """
        Get a single limit value.

        Args:
            key (str): Limit key, e.g. 'maxUsers'
            default: Value returned when the key is absent

        Returns:
            Limit value or default
        """
        return self.limits_dict.get(key, default)

    def has_module(self, module_key):
        """Check whether the plan enables a module (pos, lab, ai, ...)."""
        modules = self.limits_dict.get('modules') or {}
        return bool(modules.get(module_key, False))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'priceMonthly': float(self.price_monthly or 0),
            'priceYearly': float(self.price_yearly or 0),
            'features': self.features_list,
            'limits': self.limits_dict,
            'isActive': self.is_active,
        }
