"""Contacts: a paginated HTML list plus a small JSON API.

Exercises the layout/page template split, ``Pages`` driven by
``?page=&limit=``, a route group with its own middleware, body binding
and static files.

Run:
    python app.py
"""

import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path

from ron import Context, Engine, EngineConfig, Pages, TemplateData
from ron.errors import BindError
from ron.middleware import RequestIDMiddleware

HERE = Path(__file__).parent

config = EngineConfig(
    templates_path=HERE / "templates",
    static_dir=HERE / "static",
    enable_cache=True,
    log_dir=None,
)
engine = Engine(config)


@dataclass(frozen=True, slots=True)
class Contact:
    id: int
    name: str
    email: str


@dataclass
class NewContact:
    name: str = ""
    email: str = field(default="", metadata={"form": "email", "json": "email"})


_contacts: list[Contact] = [
    Contact(i, f"Contact {i}", f"contact{i}@example.com") for i in range(1, 43)
]
_lock = threading.Lock()


def _add(name: str, email: str) -> Contact:
    with _lock:
        contact = Contact(len(_contacts) + 1, name, email)
        _contacts.append(contact)
        return contact


# -- HTML --


@engine.get("/")
def index(ctx: Context) -> None:
    with _lock:
        rows = list(_contacts)
    pages = ctx.paginate(Pages(total_elements=len(rows), elements_per_page=10))
    visible = [asdict(c) for c in pages.paginate(rows)]
    data = TemplateData({"title": "Contacts", "contacts": visible}, pages)
    ctx.html(200, "page.contacts.html", data)


@engine.post("/")
def create(ctx: Context) -> None:
    new = ctx.bind_form(NewContact)
    if not new.name or not new.email:
        ctx.text(400, "name and email are required")
        return
    _add(new.name, new.email)
    ctx.redirect("/?page=999", 303)


# -- JSON API --

api = engine.group("/api").use(RequestIDMiddleware())


@api.get("/contacts")
def list_contacts(ctx: Context) -> None:
    with _lock:
        rows = list(_contacts)
    pages = ctx.paginate(Pages(total_elements=len(rows)))
    ctx.json(
        200,
        {
            "page": pages.current_page(),
            "total_pages": pages.total_pages(),
            "contacts": [asdict(c) for c in pages.paginate(rows)],
        },
    )


@api.get("/contacts/{id:int}")
def show_contact(ctx: Context) -> None:
    wanted = int(ctx.path_value("id"))
    with _lock:
        match = next((c for c in _contacts if c.id == wanted), None)
    if match is None:
        ctx.json(404, {"error": "contact not found"})
        return
    ctx.json(200, asdict(match))


@api.post("/contacts")
def create_contact(ctx: Context) -> None:
    try:
        new = ctx.bind_json(NewContact)
    except BindError as exc:
        ctx.json(400, {"error": str(exc)})
        return
    ctx.json(201, asdict(_add(new.name, new.email)))


if __name__ == "__main__":
    engine.run()
