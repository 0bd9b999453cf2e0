import logging

from cmms_rbac.core import permissions as perms
from cmms_rbac.schemas.rol import RolDefinition
from cmms_rbac.services.resolution import resolve
from cmms_rbac.services.role_catalog import RoleCatalog


def _roles(**mapping):
    return [RolDefinition(name=name, permissions=keys) for name, keys in mapping.items()]

def test_new_catalog_is_empty_and_not_hydrated():
    catalog = RoleCatalog()
    assert len(catalog) == 0
    assert catalog.is_hydrated is False
    assert catalog.hydration_attempted is False
    assert catalog.permissions_for("OPERATOR") == frozenset()
    assert catalog.capabilities == frozenset()

def test_seeded_catalog_has_default_roles(catalog: RoleCatalog):
    assert catalog.role_names() == sorted([
        "COO", "MAINTENANCE_MANAGER", "MANAGER", "MASTER", "MD", "OPERATOR", "PRODUCTION_MANAGER",
    ])
    assert catalog.permissions_for("MASTER") == frozenset(perms.ALL_PERMISSION_KEYS)
    assert catalog.is_hydrated is True

def test_role_names_are_canonicalised_on_index():
    catalog = RoleCatalog(_roles(operator=[perms.PERM_GUIDE_VIEW]))
    assert "OPERATOR" in catalog
    assert "operator" in catalog
    assert catalog.permissions_for("Operator") == frozenset({perms.PERM_GUIDE_VIEW})

def test_replace_discards_previous_roles():
    catalog = RoleCatalog(_roles(A=[perms.PERM_GUIDE_VIEW]))
    assert resolve(catalog, "A", None, perms.PERM_GUIDE_VIEW) is True

    assert catalog.replace_roles(_roles(B=[perms.PERM_ASSETS_VIEW]), seq=catalog.next_role_seq()) is True

    assert resolve(catalog, "A", None, perms.PERM_GUIDE_VIEW) is False
    assert "A" not in catalog
    assert catalog.snapshot() == {"B": frozenset({perms.PERM_ASSETS_VIEW})}

def test_duplicate_role_names_last_one_wins(caplog):
    roles = [
        RolDefinition(name="manager", permissions=[perms.PERM_GUIDE_VIEW]),
        RolDefinition(name="MANAGER", permissions=[perms.PERM_BUDGET_VIEW]),
    ]
    with caplog.at_level(logging.WARNING):
        catalog = RoleCatalog(roles)
    assert catalog.permissions_for("MANAGER") == frozenset({perms.PERM_BUDGET_VIEW})
    assert "duplicado" in caplog.text

def test_stale_sequence_is_ignored():
    catalog = RoleCatalog()
    first = catalog.next_role_seq()
    second = catalog.next_role_seq()

    assert catalog.replace_roles(_roles(NEW=[perms.PERM_GUIDE_VIEW]), seq=second) is True
    assert catalog.replace_roles(_roles(OLD=[perms.PERM_GUIDE_VIEW]), seq=first) is False

    assert catalog.role_names() == ["NEW"]

def test_replaying_same_sequence_is_ignored():
    catalog = RoleCatalog()
    seq = catalog.next_role_seq()
    assert catalog.replace_roles(_roles(A=[]), seq=seq) is True
    assert catalog.replace_roles(_roles(B=[]), seq=seq) is False
    assert catalog.role_names() == ["A"]

def test_capability_catalog_replace_and_guard():
    catalog = RoleCatalog()
    first = catalog.next_capability_seq()
    second = catalog.next_capability_seq()
    assert catalog.replace_capabilities(["a.b", "c.d"], seq=second) is True
    assert catalog.replace_capabilities(["x.y"], seq=first) is False
    assert catalog.capabilities == frozenset({"a.b", "c.d"})

def test_snapshot_is_a_copy(catalog: RoleCatalog):
    snap = catalog.snapshot()
    snap.clear()
    assert len(catalog) == 7

def test_role_label(catalog: RoleCatalog):
    assert catalog.role_label("md") == "MD"
    assert catalog.role_label("Invitado") == "Invitado"
    assert catalog.role_label(None) == "Unknown"
    assert catalog.role_label("") == "Unknown"

def test_contains_rejects_non_strings(catalog: RoleCatalog):
    assert 5 not in catalog
    assert None not in catalog
