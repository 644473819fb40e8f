"""Skin-type and sensitivity matching. Hard filters, no partial credit."""

from skinroutine.schemas import PatientProfile, Product, SkinType


def has_skin_type(product: Product, skin_type: SkinType) -> bool:
    wanted = skin_type.value
    return any(wanted in tag.lower() for tag in product.skin_types)


def matches_profile(product: Product, profile: PatientProfile) -> bool:
    if not has_skin_type(product, profile.skin_type):
        return False
    if profile.is_sensitive and not product.sensitive_safe:
        return False
    return True
