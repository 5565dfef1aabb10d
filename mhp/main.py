from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request, Form, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .config import APP_NAME, LOG_LEVEL, SEED_DEMO_MENU
from .db import engine, init_db
from .dataservice import DataService, DataServiceError
from .auth import (
    hash_password, check_password, start_session, end_session,
    session_user_id, email_ok, MIN_PASSWORD_LENGTH,
)
from .shell import Identity, NavShell, Notice, SessionEvents, SignInRequired, SIGNED_IN, SIGNED_OUT, flash, redirect
from .menu import ALL_CATEGORIES, MenuBrowser, QuantitySelector
from .cart import CartPage
from .orders import OrderHistory, status_color, status_label, short_id
from .seed import seed_demo_menu
from .utils import fmt_dt, money

BASE_DIR = Path(__file__).resolve().parent

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
log = logging.getLogger("mhp")

app = FastAPI(title=APP_NAME)
app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")
templates = Jinja2Templates(directory=BASE_DIR / "templates")
templates.env.globals.update(
    app_name=APP_NAME,
    fmt_dt=fmt_dt,
    money=money,
    status_color=status_color,
    status_label=status_label,
    short_id=short_id,
)

_data_service = DataService(engine)

@app.on_event("startup")
def on_startup() -> None:
    init_db()
    if SEED_DEMO_MENU:
        seed_demo_menu(engine)

# ---- Dependencies ----

def get_data_service() -> DataService:
    return _data_service

def current_identity(request: Request, data: DataService) -> Identity | None:
    uid = session_user_id(request)
    if not uid:
        return None
    try:
        user = data.get_user(uid)
    except DataServiceError:
        log.warning("could not resolve session for %s", uid)
        return None
    if not user:
        return None
    return Identity(id=user.id, email=user.email)

def get_shell(request: Request, data: DataService = Depends(get_data_service)):
    shell = NavShell(data, current_identity(request, data), SessionEvents())
    try:
        yield shell
    finally:
        shell.close()

def render(request: Request, name: str, shell: NavShell, **context) -> HTMLResponse:
    return templates.TemplateResponse(request, name, {
        "shell": shell,
        "flash": flash(request),
        **context,
    })

def sign_in_redirect(message: str) -> RedirectResponse:
    return redirect("/auth", Notice.error(message))

# ---- Landing ----

@app.get("/", response_class=HTMLResponse)
def landing(request: Request, shell: NavShell = Depends(get_shell)):
    return render(request, "index.html", shell)

@app.get("/health")
def health():
    return {"status": "ok"}

# ---- Sign in / out ----

@app.get("/auth", response_class=HTMLResponse)
def auth_page(request: Request, shell: NavShell = Depends(get_shell)):
    if shell.signed_in:
        return RedirectResponse("/menu", status_code=302)
    return render(request, "auth.html", shell)

@app.post("/auth/sign-in")
def sign_in(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    email = email.strip().lower()
    try:
        user = data.find_user_by_email(email)
    except DataServiceError:
        return redirect("/auth", Notice.error("Sign in failed, please try again"))
    if not user or not check_password(password, user.password_hash):
        return redirect("/auth", Notice.error("Invalid credentials"))

    identity = Identity(id=user.id, email=user.email)
    shell.events.publish(SIGNED_IN, identity)
    response = redirect("/menu", Notice.ok("Signed in"))
    start_session(response, user.id)
    return response

@app.post("/auth/sign-up")
def sign_up(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    full_name: str = Form(""),
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    email = email.strip().lower()
    if not email_ok(email):
        return redirect("/auth", Notice.error("Please enter a valid email address"))
    if len(password) < MIN_PASSWORD_LENGTH:
        return redirect("/auth", Notice.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters"))

    try:
        if data.find_user_by_email(email):
            return redirect("/auth", Notice.error("Account already exists"))
        user = data.create_user(email, hash_password(password), full_name.strip() or None)
    except DataServiceError:
        return redirect("/auth", Notice.error("Sign up failed, please try again"))

    shell.events.publish(SIGNED_IN, Identity(id=user.id, email=user.email))
    response = redirect("/menu", Notice.ok("Account created"))
    start_session(response, user.id)
    return response

@app.post("/auth/sign-out")
def sign_out(shell: NavShell = Depends(get_shell)):
    shell.events.publish(SIGNED_OUT, None)
    response = RedirectResponse("/", status_code=302)
    end_session(response)
    return response

# ---- Menu ----

@app.get("/menu", response_class=HTMLResponse)
def menu_page(
    request: Request,
    category: str = ALL_CATEGORIES,
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    browser = MenuBrowser(data, shell, QuantitySelector.from_request(request))
    browser.load()
    return render(
        request, "menu.html", shell,
        categories=browser.categories,
        items=browser.items,
        visible_ids={it.id for it in browser.filtered(category)},
        selected_category=category,
        all_categories=ALL_CATEGORIES,
        quantities=browser.quantities,
    )

@app.post("/menu/{item_id}/quantity")
def menu_quantity(
    request: Request,
    item_id: str,
    delta: int = Form(0),
    category: str = Form(ALL_CATEGORIES),
):
    quantities = QuantitySelector.from_request(request)
    quantities.change(item_id, delta)
    response = redirect("/menu", category=category)
    quantities.save(response)
    return response

@app.post("/menu/{item_id}/add")
def menu_add(
    request: Request,
    item_id: str,
    category: str = Form(ALL_CATEGORIES),
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    browser = MenuBrowser(data, shell, QuantitySelector.from_request(request))
    try:
        notice = browser.add_to_cart(item_id)
    except SignInRequired as exc:
        return sign_in_redirect(exc.message)

    response = redirect("/menu", notice, category=category)
    if notice.kind == "ok":
        browser.quantities.save(response)
    return response

# ---- Cart ----

@app.get("/cart", response_class=HTMLResponse)
def cart_page(
    request: Request,
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    if not shell.signed_in:
        return RedirectResponse("/auth", status_code=302)
    page = CartPage(data, shell.identity)
    page.load()
    return render(request, "cart.html", shell, page=page)

@app.post("/cart/{line_id}/quantity")
def cart_quantity(
    line_id: str,
    quantity: int = Form(...),
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    if not shell.signed_in:
        return RedirectResponse("/auth", status_code=302)
    page = CartPage(data, shell.identity)
    page.update_quantity(line_id, quantity)
    return RedirectResponse("/cart", status_code=302)

@app.post("/cart/{line_id}/remove")
def cart_remove(
    line_id: str,
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    if not shell.signed_in:
        return RedirectResponse("/auth", status_code=302)
    page = CartPage(data, shell.identity)
    return redirect("/cart", page.remove(line_id))

@app.post("/cart/checkout")
def cart_checkout(
    delivery_address: str = Form(""),
    phone: str = Form(""),
    notes: str = Form(""),
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    if not shell.signed_in:
        return RedirectResponse("/auth", status_code=302)
    page = CartPage(data, shell.identity)
    page.load()
    notice = page.checkout(delivery_address, phone, notes)
    if notice.kind != "ok":
        return redirect("/cart", notice)
    return redirect("/orders", notice)

# ---- Order history ----

@app.get("/orders", response_class=HTMLResponse)
def orders_page(
    request: Request,
    shell: NavShell = Depends(get_shell),
    data: DataService = Depends(get_data_service),
):
    if not shell.signed_in:
        return RedirectResponse("/auth", status_code=302)
    history = OrderHistory(data, shell.identity)
    history.load()
    return render(request, "orders.html", shell, orders=history.orders)
