from fastapi import HTTPException

class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "authentication required"):
        super().__init__(status_code=401, detail=detail)

class PermissionDenied(HTTPException):
    reason = "insufficient_permissions"

    def __init__(self) -> None:
        super().__init__(status_code=403, detail=self.reason)

class ResourceNotFound(HTTPException):
    def __init__(self, resource: str):
        super().__init__(status_code=404, detail=f"{resource} not found")

class ResourceChanged(HTTPException):
    # ownership changed between the check and the conditional write
    def __init__(self) -> None:
        super().__init__(status_code=409, detail="resource changed")
