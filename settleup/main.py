from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from settleup.api.settlements import router as settlements_router

logging.basicConfig(
    level=os.getenv("SETTLEUP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Settle Up API")
app.include_router(settlements_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
