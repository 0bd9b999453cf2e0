# =================================================================
# Roles por defecto
# =================================================================
# Nombres canónicos (mayúsculas) de los roles sembrados en el backend.
# Los roles son dinámicos: pueden crearse otros desde Configuración,
# por eso estos nombres NO son una lista cerrada.
# =================================================================

OPERATOR_ROLE_NAME = "OPERATOR"
MANAGER_ROLE_NAME = "MANAGER"
PRODUCTION_MANAGER_ROLE_NAME = "PRODUCTION_MANAGER"
MAINTENANCE_MANAGER_ROLE_NAME = "MAINTENANCE_MANAGER"
COO_ROLE_NAME = "COO"
MD_ROLE_NAME = "MD"
MASTER_ROLE_NAME = "MASTER"


# =================================================================
# Claves de Capacidad (permisos)
# =================================================================
# Claves que la aplicación consulta. Coinciden exactamente (sensible
# a mayúsculas) con las claves que devuelve /rbac/permissions.
# =================================================================

# --- Órdenes de Trabajo ---
PERM_WORK_ORDERS_REQUEST = "workOrders.request"
PERM_WORK_ORDERS_UPDATE_STATUS = "workOrders.updateStatus"
PERM_WORK_ORDERS_ADD_NOTES = "workOrders.addNotes"
PERM_WORK_ORDERS_VIEW_ALL = "workOrders.viewAll"
PERM_WORK_ORDERS_CREATE = "workOrders.create"
PERM_WORK_ORDERS_APPROVE = "workOrders.approve"
PERM_WORK_ORDERS_ASSIGN = "workOrders.assign"
PERM_WORK_ORDERS_CLOSE = "workOrders.close"

# --- Activos ---
PERM_ASSETS_VIEW = "assets.view"
PERM_ASSETS_EDIT = "assets.edit"
PERM_ASSETS_CREATE = "assets.create"

# --- Mantenimiento Preventivo ---
PERM_PM_VIEW = "pm.view"
PERM_PM_MANAGE = "pm.manage"

# --- Averías ---
PERM_BREAKDOWN_REPORT = "breakdown.report"
PERM_BREAKDOWN_VIEW = "breakdown.view"

# --- Inventario ---
PERM_INVENTORY_REQUEST = "inventory.request"
PERM_INVENTORY_MANAGE = "inventory.manage"
PERM_INVENTORY_CREATE = "inventory.create"

# --- Tiempos Muertos / Reportes ---
PERM_DOWNTIME_LOG = "downtime.log"
PERM_DOWNTIME_ANALYZE_TEAM = "downtime.analyzeTeam"
PERM_DOWNTIME_ANALYZE_COMPANY = "downtime.analyzeCompany"

# --- KPIs / Dashboard ---
PERM_KPI_VIEW_TEAM = "kpi.viewTeam"
PERM_KPI_VIEW_GLOBAL = "kpi.viewGlobal"

# --- Presupuesto ---
PERM_BUDGET_VIEW = "budget.view"
PERM_BUDGET_APPROVE = "budget.approve"
PERM_BUDGET_INPUT_MAINTENANCE_COSTS = "budget.inputMaintenanceCosts"

# --- Usuarios ---
PERM_USERS_MANAGE_TEAM = "users.manageTeam"
PERM_USERS_MANAGE_ALL = "users.manageAll"
PERM_USERS_CREATE = "users.create"

# --- Auditoría ---
PERM_AUDIT_VIEW = "audit.view"
PERM_AUDIT_MAINTAIN = "audit.maintain"

# --- Guía ---
PERM_GUIDE_VIEW = "guide.view"

# =================================================================
# Todas las claves conocidas (el rol MASTER las tiene todas)
# =================================================================
ALL_PERMISSION_KEYS = tuple(
    value for name, value in sorted(globals().items()) if name.startswith("PERM_")
)
