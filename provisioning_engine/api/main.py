import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from provisioning_engine.api.routes.servers import router as servers_router
from provisioning_engine.core.errors import PanelError

logger = logging.getLogger(__name__)

app = FastAPI(title="Server Provisioning API")


@app.exception_handler(PanelError)
def unhandled_panel_error(request: Request, exc: PanelError):
    # Routes map the known errors; anything reaching here is a server-side fault
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(servers_router)
