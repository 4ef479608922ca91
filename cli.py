# cli.py
# Interactive OSAKA admin console (rich + prompt_toolkit) on top of the HTTP API.
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

import requests

from osaka.views import format_price
from sdk.osakaclient import OsakaClient

console = Console()
c = OsakaClient(base_url=os.getenv("OSAKA_API_URL", "http://127.0.0.1:8085"))


# Last successfully fetched lists; only replaced by another successful fetch
product_cache: List[Dict[str, Any]] = []
slide_cache: List[Dict[str, Any]] = []
type_cache: List[Dict[str, Any]] = []
category_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#880000 #ffffff',
    'completion-menu.completion.current': 'bg:#cc0000 #ffffff',
    'scrollbar.background': 'bg:#aa8888',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📺 Products",
        box=box.ROUNDED,
        header_style="bold red",
        title_style="bold white",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=32)
    table.add_column("Category", width=10)
    table.add_column("Size", width=6)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Status", width=10)

    for p in products:
        active = p.get("is_active", False)
        table.add_row(
            p.get("id", "N/A")[:12],
            p.get("name", "N/A"),
            p.get("category", "N/A"),
            p.get("size", ""),
            format_price(p.get("price", 0)),
            "[green]Active[/green]" if active else "[dim]Inactive[/dim]"
        )
    console.print(table)


def show_slides(slides: List[Dict[str, Any]]):
    if not slides:
        console.print("[italic yellow]No hero slides yet[/italic yellow]")
        return

    table = Table(title="🖼️ Hero slides", box=box.ROUNDED, header_style="bold red", show_lines=True)
    table.add_column("Order", justify="right", width=6)
    table.add_column("ID", style="dim", width=12)
    table.add_column("Title", style="bold", width=30)
    table.add_column("Image", width=40)
    table.add_column("Status", width=10)

    for s in slides:
        table.add_row(
            str(s.get("display_order", 0)),
            s.get("id", "N/A")[:12],
            s.get("title", ""),
            s.get("image_url", ""),
            "[green]Active[/green]" if s.get("is_active") else "[dim]Inactive[/dim]"
        )
    console.print(table)


def show_types(types: List[Dict[str, Any]]):
    if not types:
        console.print("[italic yellow]No product types yet[/italic yellow]")
        return
    table = Table(title="🏷️ Product types", box=box.SIMPLE, header_style="bold red")
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold")
    for t in types:
        table.add_row(t.get("id", "")[:12], t.get("name", ""))
    console.print(table)


def show_catalog(sections: List[Dict[str, Any]]):
    if not sections:
        console.print(Panel("No active products on the public site", style="yellow"))
        return
    for section in sections:
        table = Table(box=box.ROUNDED, show_header=False)
        table.add_column("Name", style="bold", width=36)
        table.add_column("Price", justify="right", style="bold red", width=14)
        for p in section.get("products", []):
            table.add_row(p.get("name", ""), format_price(p.get("price", 0)))
        console.print(Panel(table, title=f"[red]{section['category']}[/red] Televisions", border_style="red"))


def show_stats(stats: Dict[str, Any]):
    console.print(Panel.fit(
        f"📺 Total: [bold]{stats.get('total', 0)}[/bold]   "
        f"✅ Active: [bold green]{stats.get('active', 0)}[/bold green]   "
        f"❌ Inactive: [bold]{stats.get('inactive', 0)}[/bold]",
        title="Dashboard",
        border_style="red"
    ))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_text(e: requests.RequestException) -> str:
    resp = getattr(e, "response", None)
    if resp is None:
        return str(e)
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text}"
    violations = body.get("violations")
    if violations:
        return "Please fix: " + ", ".join(v.replace("_", " ") for v in violations)
    return f"HTTP {resp.status_code}: {body.get('detail', body)}"


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the decoded result, or None after reporting the failure.
    """
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Working...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            console.print(show_status(success_msg, True))
        return result
    except (requests.RequestException, OSError) as e:
        text = _error_text(e) if isinstance(e, requests.RequestException) else str(e)
        console.print(show_status(f"Error: {text}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def _completer(records: List[Dict[str, Any]], *fields: str):
    words = [str(r.get(f, "")) for r in records for f in fields]
    return WordCompleter([w for w in words if w], ignore_case=True, sentence=True)


def category_names() -> List[str]:
    global category_cache
    if not category_cache:
        category_cache = try_api(c.categories) or []
    return [cat["category"] for cat in category_cache]


def category_info(name: str) -> Optional[Dict[str, Any]]:
    category_names()
    return next((cat for cat in category_cache if cat["category"] == name), None)


def pick_record(cache: List[Dict[str, Any]], label: str) -> Optional[Dict[str, Any]]:
    raw = prompt_with_autocomplete(f"{label} (id or name)", completer=_completer(cache, "id", "name", "title")).strip()
    for r in cache:
        if raw and raw in (r.get("id"), r.get("name"), r.get("title")):
            return r
    matches = [r for r in cache if raw and r.get("id", "").startswith(raw)]
    if len(matches) == 1:
        return matches[0]
    console.print(f"[red]No single match for '{raw}'[/red]")
    return None


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "📺 OSAKA Admin",
        "[bold red]Television catalog back-office[/bold red]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold red")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_image(kind: str, current: Optional[str]) -> Optional[str]:
    """Optionally upload a new image; a failed upload keeps ``current``."""
    path = Prompt.ask("🖼️ Image file to upload (blank keeps current)", default="").strip()
    if not path:
        return current
    url = try_api(c.upload_image, kind, os.path.expanduser(path), success_msg="Image uploaded successfully!")
    return url or current


# ---------------------------
# Forms
# ---------------------------
def product_form(existing: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    form = dict(existing or {})
    names = category_names()
    if not names:
        return None
    category = ""
    while category not in names:
        category = prompt_with_autocomplete(
            "📏 Category", completer=WordCompleter(names, sentence=True), default=form.get("category", "")
        ).strip()
    if category != form.get("category"):
        form.update(model="", product_type="")
    form["category"] = category

    choices = try_api(c.choices, category)
    if choices is None:
        return None
    form["model"] = prompt_with_autocomplete(
        "📺 Model", completer=WordCompleter(choices["models"], sentence=True), default=form.get("model", "")
    ).strip()
    if (category_info(category) or {}).get("requires_type"):
        types = sorted({pair["product_type"] for pair in choices["combinations"]
                        if pair["model"] == form["model"]} or set(choices["types"]))
        if not types:
            console.print("[yellow]No product types yet; add one from the menu first.[/yellow]")
        form["product_type"] = prompt_with_autocomplete(
            "🏷️ Type", completer=WordCompleter(types, sentence=True), default=form.get("product_type", "")
        ).strip()
    else:
        form["product_type"] = ""

    form["price"] = IntPrompt.ask("💰 Price (৳)", default=form.get("price") or 0)
    form["description"] = Prompt.ask("📝 Description", default=form.get("description") or "")
    form["image_url"] = ask_image("product", form.get("image_url"))
    form["is_active"] = Confirm.ask("Visible on the public site?", default=form.get("is_active", True))
    return form


def slide_form(existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    form = dict(existing or {})
    form["title"] = Prompt.ask("🏷️ Title", default=form.get("title", ""))
    form["description"] = Prompt.ask("📝 Description", default=form.get("description") or "")
    form["image_url"] = ask_image("hero", form.get("image_url")) or ""
    form["display_order"] = IntPrompt.ask("🔢 Display order", default=form.get("display_order", 0))
    form["is_active"] = Confirm.ask("Show in the carousel?", default=form.get("is_active", True))
    return form


# ---------------------------
# Main menu
# ---------------------------
def login():
    while True:
        password = Prompt.ask("🔐 Admin password", password=True)
        if try_api(c.login, password, success_msg="Logged in") is not None:
            return


def menu():
    global product_cache, slide_cache, type_cache

    console.clear()
    console.print(create_header())
    login()

    product_cache = try_api(c.list_products) or []
    type_cache = try_api(c.list_types) or []

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold red", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold red", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📺 List products", "9", "🔁 Toggle slide"),
            ("2", "➕ Add product", "10", "🗑️ Delete slide"),
            ("3", "✏️ Edit product", "11", "🏷️ List types"),
            ("4", "🔁 Toggle product", "12", "➕ Add type"),
            ("5", "🗑️ Delete product", "13", "🗑️ Delete type"),
            ("6", "🖼️ List hero slides", "14", "🌐 Public catalog"),
            ("7", "➕ Add slide", "15", "📊 Dashboard"),
            ("8", "✏️ Edit slide", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="red"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 16)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded")
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "2":
            form = product_form()
            products = try_api(c.add_product, form, success_msg="Product added!") if form else None
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "3":
            record = pick_record(product_cache, "Product")
            current = try_api(c.product_form, record["id"]) if record else None
            form = product_form(current) if current else None
            if form:
                products = try_api(c.update_product, record["id"], form, success_msg="Product updated!")
                if products is not None:
                    product_cache = products
                    show_products(products)

        elif choice == "4":
            record = pick_record(product_cache, "Product")
            if record:
                products = try_api(c.toggle_product, record["id"], record["is_active"],
                                   success_msg=f"'{record['name']}' is now {'inactive' if record['is_active'] else 'active'}")
                if products is not None:
                    product_cache = products
                    show_products(products)

        elif choice == "5":
            record = pick_record(product_cache, "Product")
            if record and Confirm.ask(f"[red]Delete '{record['name']}'? This cannot be undone.[/red]"):
                products = try_api(c.delete_product, record["id"], success_msg="Product deleted")
                if products is not None:
                    product_cache = products

        elif choice == "6":
            slides = try_api(c.list_slides, success_msg="Slides loaded")
            if slides is not None:
                slide_cache = slides
                show_slides(slides)

        elif choice == "7":
            slides = try_api(c.add_slide, slide_form(), success_msg="New slide added!")
            if slides is not None:
                slide_cache = slides
                show_slides(slides)

        elif choice == "8":
            record = pick_record(slide_cache, "Slide")
            if record:
                current = try_api(c.slide_form, record["id"])
                if current:
                    slides = try_api(c.update_slide, record["id"], slide_form(current), success_msg="Slide updated!")
                    if slides is not None:
                        slide_cache = slides
                        show_slides(slides)

        elif choice == "9":
            record = pick_record(slide_cache, "Slide")
            if record:
                slides = try_api(c.toggle_slide, record["id"], record["is_active"], success_msg="Slide toggled")
                if slides is not None:
                    slide_cache = slides
                    show_slides(slides)

        elif choice == "10":
            record = pick_record(slide_cache, "Slide")
            if record and Confirm.ask("[red]Are you sure you want to delete this slide?[/red]"):
                slides = try_api(c.delete_slide, record["id"], success_msg="Slide removed")
                if slides is not None:
                    slide_cache = slides

        elif choice == "11":
            types = try_api(c.list_types, success_msg="Types loaded")
            if types is not None:
                type_cache = types
                show_types(types)

        elif choice == "12":
            name = Prompt.ask("🏷️ New type name").strip()
            types = try_api(c.add_type, name, success_msg=f"Type '{name}' added")
            if types is not None:
                type_cache = types
                show_types(types)

        elif choice == "13":
            record = pick_record(type_cache, "Type")
            if record and Confirm.ask(
                f"[red]Delete type '{record['name']}'? Products already using it keep their names.[/red]"
            ):
                types = try_api(c.delete_type, record["id"], success_msg="Type deleted")
                if types is not None:
                    type_cache = types

        elif choice == "14":
            sections = try_api(c.catalog, success_msg="Public catalog loaded")
            if sections is not None:
                show_catalog(sections)

        elif choice == "15":
            stats = try_api(c.stats)
            if stats:
                show_stats(stats)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                c.logout()
                console.print(Panel.fit("[bold green]Goodbye from OSAKA Admin 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
