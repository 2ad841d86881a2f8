"""Interpret endpoint: AST in, ordered actions out."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from daoscript.ast import load_ast
from daoscript.config import InterpreterConfig
from daoscript.errors import DaoScriptError
from daoscript.providers import JsonRpcProvider, Signer
from daoscript.runtime.interpreter import Interpreter

logger = logging.getLogger(__name__)

router = APIRouter()


class InterpretRequest(BaseModel):
    """Request body for script interpretation."""
    ast: Dict[str, Any]
    from_address: str
    rpc_url: Optional[str] = None
    ipfs_gateway: Optional[str] = None
    subgraph_url: Optional[str] = None


class InterpretResponse(BaseModel):
    """Response body for script interpretation."""
    success: bool
    actions: List[Dict[str, Any]] = []
    digest: str = ""
    errors: List[Dict[str, Any]] = []
    execution_time_ms: float = 0.0


def build_config(request: InterpretRequest) -> InterpreterConfig:
    config = InterpreterConfig.from_env()
    config.from_address = request.from_address
    if request.rpc_url:
        config.rpc_url = request.rpc_url
    if request.ipfs_gateway:
        config.ipfs_gateway = request.ipfs_gateway
    if request.subgraph_url:
        config.subgraph_url = request.subgraph_url
    return config


@router.post("/interpret", response_model=InterpretResponse)
def interpret_endpoint(request: InterpretRequest):
    """Interpret a script. Failures are reported in the body; no partial action list is returned."""
    config = build_config(request)
    try:
        program = load_ast(request.ast)
        signer = Signer(JsonRpcProvider(config.rpc_url, timeout=config.http_timeout), config.from_address)
    except DaoScriptError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = Interpreter(program, signer, config).run()
    logger.debug("Interpreted %d statement(s): success=%s", len(program.body), result.success)
    return InterpretResponse(**result.to_dict())
