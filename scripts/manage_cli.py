import sys
import asyncio
import argparse
from os.path import abspath, dirname

root_dir = dirname(dirname(abspath(__file__)))
sys.path.append(root_dir)

from cmms_rbac.core.config import settings
from cmms_rbac.core.exceptions import RbacError
from cmms_rbac.core.feature_groups import find_unknown_keys
from cmms_rbac.core.logging_config import setup_logging
from cmms_rbac.schemas.override import UserOverride
from cmms_rbac.services import (
    PermissionResolver,
    RbacApiClient,
    RoleCatalog,
    UserOverrideService,
    access_summary,
    hydrate_capability_catalog,
    hydrate_role_catalog,
)

# --- Comandos de consulta ---

async def list_roles(client: RbacApiClient):
    """Muestra los roles del backend con el número de capacidades de cada uno."""
    print("\n--- CATÁLOGO DE ROLES ---")
    catalog = RoleCatalog()
    if not await hydrate_role_catalog(catalog, client):
        print(f"❌ Error: no se pudo cargar el catálogo de roles desde {client.base_url}.")
        return
    if not len(catalog):
        print("-> El backend no devolvió ningún rol.")
        return
    print(f"{'ROL':<22} | {'CAPACIDADES'}")
    print("-" * 70)
    for name in catalog.role_names():
        keys = sorted(catalog.permissions_for(name))
        print(f"{name:<22} | {len(keys):>3}  {', '.join(keys[:4])}{' ...' if len(keys) > 4 else ''}")
    print("-" * 70)
    print(f"Total: {len(catalog)} roles.")

async def check_registry(client: RbacApiClient):
    """Verifica que todas las claves de los grupos de funcionalidades existan en el backend."""
    print("\n--- VERIFICACIÓN DEL REGISTRO DE GRUPOS ---")
    catalog = RoleCatalog()
    if not await hydrate_capability_catalog(catalog, client):
        print("❌ Error: no se pudo cargar el catálogo de capacidades.")
        return
    unknown = find_unknown_keys(catalog.capabilities)
    if not unknown:
        print(f"✅ Todas las claves del registro existen ({len(catalog.capabilities)} capacidades en el backend).")
        return
    for group, keys in unknown.items():
        print(f"⚠️ {group:<14} | claves desconocidas: {', '.join(keys)}")

async def show_summary(client: RbacApiClient, rol: str, allow, deny):
    """Resumen de acceso por sección para un rol y overrides opcionales."""
    catalog = RoleCatalog()
    if not await hydrate_role_catalog(catalog, client):
        print("❌ Error: no se pudo cargar el catálogo de roles.")
        return
    if rol not in catalog:
        print(f"⚠️ El rol '{rol}' no existe en el catálogo; todo se resolverá a 'sin acceso'.")
    overrides = UserOverride(allow=frozenset(allow or ()), deny=frozenset(deny or ()))
    summary = access_summary(PermissionResolver(catalog), rol, overrides)
    print(f"\n--- ACCESO PARA {catalog.role_label(rol)} ---")
    for section, granted in summary.items():
        print(f"{section:<24} | {'✔️ Acceso' if granted else '✖ Sin acceso'}")

async def show_user_overrides(client: RbacApiClient, user_id: str):
    try:
        overrides = await UserOverrideService(client).get(user_id)
    except RbacError as e:
        print(f"❌ Error: {e}")
        return
    print(f"\n--- OVERRIDES DEL USUARIO {user_id} ---")
    print(f"ALLOW: {', '.join(sorted(overrides.allow)) or '(vacío)'}")
    print(f"DENY : {', '.join(sorted(overrides.deny)) or '(vacío)'}")

# --- Comandos de gestión ---

async def reset_user_overrides(client: RbacApiClient, user_id: str):
    """Elimina todos los overrides de un usuario (vuelve a heredar de su rol)."""
    try:
        await UserOverrideService(client).save(user_id, UserOverride())
    except RbacError as e:
        print(f"❌ Error al reiniciar overrides: {e}")
        return
    print(f"✅ Overrides del usuario '{user_id}' reiniciados. Ahora hereda todo de su rol.")

# --- Interfaz de Línea de Comandos Principal ---

async def run(args):
    async with RbacApiClient(args.base_url, token_provider=(lambda: args.token)) as client:
        if args.command == "list-roles":
            await list_roles(client)
        elif args.command == "check-registry":
            await check_registry(client)
        elif args.command == "summary":
            await show_summary(client, rol=args.rol, allow=args.allow, deny=args.deny)
        elif args.command == "user-overrides":
            await show_user_overrides(client, user_id=args.user_id)
        elif args.command == "reset-overrides":
            await reset_user_overrides(client, user_id=args.user_id)

def main():
    parser = argparse.ArgumentParser(description="Herramienta CLI para inspeccionar los permisos del CMMS.")
    parser.add_argument("--base-url", type=str, default=settings.API_BASE_URL, help="URL base del backend RBAC.")
    parser.add_argument("--token", type=str, default=None, help="Access token (Bearer) para el backend.")
    parser.add_argument("--verbose", action="store_true", help="Mostrar los logs del motor de permisos.")
    subparsers = parser.add_subparsers(dest="command", help="Comandos disponibles", required=True)

    subparsers.add_parser("list-roles", help="Mostrar los roles del backend y sus capacidades.")
    subparsers.add_parser("check-registry", help="Verificar las claves del registro de grupos contra el backend.")

    # Comando de resumen de acceso
    parser_summary = subparsers.add_parser("summary", help="Resumen de acceso por sección para un rol.")
    parser_summary.add_argument("--rol", type=str, required=True, help="Nombre del rol (ej: OPERATOR).")
    parser_summary.add_argument("--allow", type=str, nargs="*", help="Claves concedidas explícitamente.")
    parser_summary.add_argument("--deny", type=str, nargs="*", help="Claves denegadas explícitamente.")

    parser_show = subparsers.add_parser("user-overrides", help="Mostrar los overrides de un usuario.")
    parser_show.add_argument("--user-id", type=str, required=True, help="ID del usuario.")

    parser_reset = subparsers.add_parser("reset-overrides", help="Eliminar todos los overrides de un usuario.")
    parser_reset.add_argument("--user-id", type=str, required=True, help="ID del usuario.")

    args = parser.parse_args()
    if args.verbose:
        setup_logging()
    asyncio.run(run(args))

if __name__ == "__main__":
    main()
