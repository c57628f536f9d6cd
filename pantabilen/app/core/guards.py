"""
Security guards for role-based and tenant-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, Path, status
from pantabilen.app.models.enums import UserRole
from pantabilen.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.
    
    Usage:
        @router.get("/admin/tenants")
        async def list_tenants(current_user: dict = Depends(require_role([UserRole.SUPER_ADMIN]))):
            ...
    
    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint
        
    Returns:
        FastAPI dependency function that validates user role
        
    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        # Convert string role to UserRole enum
        try:
            user_role = UserRole(current_user.get("role"))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )
        
        # Check if user role is in allowed roles
        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )
        
        return current_user
    
    return role_checker


def can_access_tenant(tenant_id: int, current_user: dict) -> bool:
    """
    Check whether the current user may act on a tenant.
    
    Super admins may act on every tenant; everyone else only on the
    tenant their token is bound to.
    """
    if current_user.get("role") == UserRole.SUPER_ADMIN.value:
        return True
    return current_user.get("tenant_id") == tenant_id


class TenantGuard:
    """
    Class-based guard for validating multi-tenant access.
    
    Usage:
        tenant_guard = TenantGuard()
        
        @router.get("/tenants/{tenant_id}/distance-rules")
        async def list_rules(
            tenant_id: int,
            current_user: dict = Depends(tenant_guard.admin_of_path_tenant),
        ):
            ...
    """
    
    def enforce(self, tenant_id: int, current_user: dict, resource_name: str = "tenant"):
        """
        Enforce tenant access, raise 403 if access denied.
        
        Raises:
            HTTPException 403 if the tenant check fails
        """
        if not can_access_tenant(tenant_id, current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. You do not have permission to access this {resource_name}."
            )
    
    async def admin_of_path_tenant(
        self,
        tenant_id: int = Path(..., description="Tenant ID"),
        current_user: dict = Depends(require_role([UserRole.TENANT_ADMIN, UserRole.SUPER_ADMIN])),
    ) -> dict:
        """Dependency: tenant or super admin acting on the tenant in the path."""
        self.enforce(tenant_id, current_user)
        return current_user


tenant_guard = TenantGuard()
