from fastapi import FastAPI, Request, Form, Depends, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
import logging
import os

from workshop_registration.routes.export_registrations import router as export_router
from .schemas import RegistrationIn, Slot, SlotsFull
from .service import RegistrationRejected, SLOT_CAPACITY, availability, register
from .sheets import get_row_store

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
GENERIC_FORM_ERROR = "Failed to submit registration"

app = FastAPI(title="Workshop Registration (Sheets)", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)
app.include_router(export_router, prefix="/api", tags=["Export"])
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def handle_registration(payload: RegistrationIn, store) -> tuple[int, dict]:
    """Run one submission and shape the outcome as (status code, JSON body)."""
    try:
        slots_full = register(payload, store)
    except RegistrationRejected as e:
        body = {"error": e.message}
        if e.slots_full is not None:
            body["slotsFull"] = e.slots_full.model_dump()
        return 400, body
    except Exception as e:
        logger.exception("Registration failed")
        return 500, {"error": "Internal server error", "details": str(e) or "Unexpected error occurred"}
    return 200, {
        "success": True,
        "message": "Registration successful",
        "slotsFull": slots_full.model_dump(),
    }


# ---------- JSON API ----------
@app.post("/register")
def api_register(payload: RegistrationIn, store=Depends(get_row_store)):
    status_code, body = handle_registration(payload, store)
    return JSONResponse(status_code=status_code, content=body)


@app.get("/api/slots")
def slot_availability(store=Depends(get_row_store)):
    try:
        counts, slots_full = availability(store)
    except Exception as e:
        logger.exception("Could not read slot availability")
        raise HTTPException(status_code=502, detail=f"Sheets error: {str(e)}")
    return {
        "slotsFull": slots_full.model_dump(),
        "counts": {slot.key: counts[slot] for slot in Slot},
        "capacity": SLOT_CAPACITY,
    }


# ---------- Registration form (browser) ----------
def empty_form() -> dict:
    return {"name": "", "email": "", "contact": "", "isAffiliated": False, "affiliationId": "", "slot": ""}


def render_form(request: Request, form: dict, error=None, slots_full=None, status_code=200):
    return templates.TemplateResponse(
        request,
        "register.html",
        {
            "form": form,
            "error": error,
            "slots": list(Slot),
            "slots_full": (slots_full or SlotsFull()).model_dump(),
        },
        status_code=status_code,
    )


@app.get("/", response_class=HTMLResponse)
def page_register(request: Request):
    return render_form(request, empty_form())


@app.post("/", response_class=HTMLResponse)
def submit_register(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    contact: str = Form(""),
    isAffiliated: str = Form("no"),
    affiliationId: str = Form(""),
    slot: str = Form(""),
    store=Depends(get_row_store),
):
    form = {
        "name": name,
        "email": email,
        "contact": contact,
        "isAffiliated": isAffiliated.lower() in ("yes", "true", "on", "1"),
        "affiliationId": affiliationId,
        "slot": slot,
    }
    status_code, body = handle_registration(RegistrationIn(**form), store)
    if status_code == 200:
        # fields are not carried over; the next GET starts from an empty form
        return templates.TemplateResponse(request, "thanks.html", {"title": "Registration Successful!"})

    slots_full = SlotsFull(**body["slotsFull"]) if "slotsFull" in body else None
    return render_form(
        request,
        form,
        error=body.get("error") or GENERIC_FORM_ERROR,
        slots_full=slots_full,
        status_code=status_code,
    )
