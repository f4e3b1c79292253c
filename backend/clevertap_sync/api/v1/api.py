from fastapi import APIRouter

from clevertap_sync.api.v1.endpoints import auth, connections, sync_configurations, sync, audit_logs

api_router = APIRouter()
api_router.include_router(connections.router, prefix="/connections", tags=["connections"])
api_router.include_router(sync_configurations.router, prefix="/sync-configurations", tags=["sync-configurations"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
api_router.include_router(auth.router, tags=["auth"])
