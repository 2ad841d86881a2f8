"""Validate endpoint for script ASTs."""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Any, Dict, List

from daoscript.ast import iter_commands, load_ast
from daoscript.errors import DaoScriptError
from daoscript.runtime.interpreter import pre_validate_program

router = APIRouter()


class ValidateRequest(BaseModel):
    """Request body for AST validation."""
    ast: Dict[str, Any]


class ValidateResponse(BaseModel):
    """Response body for AST validation."""
    valid: bool
    statement_count: int = 0
    command_count: int = 0
    errors: List[str] = []


@router.post("/validate", response_model=ValidateResponse)
async def validate_ast_endpoint(request: ValidateRequest):
    """Validate a script AST against the schema and every command's static checks."""
    try:
        program = load_ast(request.ast)
    except DaoScriptError as e:
        return ValidateResponse(valid=False, errors=[str(e)])

    errors = pre_validate_program(program)
    return ValidateResponse(
        valid=len(errors) == 0,
        statement_count=len(program.body),
        command_count=sum(1 for _ in iter_commands(list(program.body))),
        errors=errors,
    )
