from fastapi import HTTPException

from app.core.errors import Err, ErrorKind, Ok, Result


def error_detail(err: Err) -> dict:
    detail = {"message": err.message, "code": err.kind.value}
    if err.reason:
        detail["reason"] = err.reason
    if err.issues:
        detail["errors"] = [{"field": i.field, "message": i.message} for i in err.issues]
    return detail


def unwrap(result: Result):
    """Devuelve el valor de un Ok o lanza la HTTPException equivalente al Err."""
    if isinstance(result, Ok):
        return result.value

    headers = {"WWW-Authenticate": "Bearer"} if result.kind == ErrorKind.UNAUTHENTICATED else None
    raise HTTPException(status_code=result.status_code, detail=error_detail(result), headers=headers)
