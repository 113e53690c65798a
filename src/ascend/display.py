"""Rich terminal display for ascend."""

from __future__ import annotations

from datetime import date

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()

WEEKDAY_HEADERS = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        value = n / 1_000
        if value >= 1000:
            return f"{value:.0f}K"
        return f"{value:.1f}K"
    return f"{n:,}"


def _bar(current: int, total: int, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    if total <= 0:
        return "[" + "█" * width + "]"
    ratio = min(current / total, 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "█" * filled + "░" * empty + "]"


def _clock(days: int, hours: int, minutes: int, seconds: int) -> str:
    return f"{days}d {hours:02d}h {minutes:02d}m {seconds:02d}s"


def render_dashboard(data: dict) -> Panel:
    """Build the dashboard panel: streak clock, rank, points, best streak, benefits."""
    color = data.get("rank_color", "grey62")
    lines: list[str] = [""]

    if not data.get("started"):
        lines.append("  No active streak.")
        lines.append("  Run [bold]ascend start[/] to begin your journey.")
    else:
        lines.append(
            f"  [bold]{_clock(data['days'], data['hours'], data['minutes'], data['seconds'])}[/]"
        )
        lines.append(f"  [bold {color}]{data.get('rank_name', '')}[/]")

        next_name = data.get("next_rank_name")
        if next_name:
            into, span = data.get("rank_progress", (0, 0))
            lines.append(f"  {_bar(into, span)} {into}/{span} days to {next_name}")
        else:
            lines.append(f"  {_bar(1, 1)} Top rank reached")

    lines.append("")
    lines.append(
        f"  ⭐ Points: {format_number(data.get('points', 0))}  |  "
        f"\U0001f3c6 Best: {data.get('best_streak_days', 0)} days"
    )
    lines.append(
        f"  \U0001f3c5 Badges: {data.get('badges_unlocked', 0)}/{data.get('badges_total', 0)}  |  "
        f"\U0001f504 Relapses: {data.get('relapse_count', 0)}"
    )

    next_badge = data.get("next_badge")
    if next_badge:
        lines.append(f"  Next badge: {next_badge['icon']} {next_badge['name']} in {next_badge['days_left']} days")

    benefits = data.get("benefits", [])
    if benefits:
        lines.append("")
        lines.append("  [bold]Benefits Timeline:[/]")
        for benefit in benefits:
            mark = "✅" if benefit["reached"] else "⏳"
            style = "" if benefit["reached"] else "[grey50]"
            end = "" if benefit["reached"] else "[/]"
            lines.append(f"  {mark} {style}Day {benefit['days']}: {benefit['title']}{end}")

    lines.append("")
    return Panel(
        "\n".join(lines),
        title="[bold]ASCEND[/]",
        box=box.ROUNDED,
        border_style=color,
        width=60,
    )


def print_dashboard(data: dict) -> None:
    console.print(render_dashboard(data))


def print_badges(badges: list[dict]) -> None:
    """Print the badge catalog with unlock state.

    Each dict has: id, icon, name, description, days, unlocked (bool), days_left (int).
    """
    table = Table(title="Badges", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("", width=3)
    table.add_column("Badge", min_width=20)
    table.add_column("Days", justify="right", width=6)
    table.add_column("Status", min_width=14)

    for badge in badges:
        name_text = f"[bold]{badge['name']}[/]\n{badge.get('description', '')}"
        if badge.get("unlocked"):
            status = "[green]✅ Unlocked[/]"
        else:
            status = f"[grey50]⏳ {badge.get('days_left', badge['days'])} days left[/]"
        table.add_row(badge.get("icon", ""), name_text, str(badge["days"]), status)

    console.print(table)


def print_history(relapses: list[dict]) -> None:
    """Print the relapse history, newest first."""
    if not relapses:
        print_message("Relapse History", "No relapses recorded. Keep going!", "green")
        return
    table = Table(title="Relapse History", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=4)
    table.add_column("Date", width=20)
    table.add_column("Note")
    for i, relapse in enumerate(relapses, start=1):
        table.add_row(str(i), relapse["date"], f"[italic]\"{escape(relapse['note'])}\"[/]")
    console.print(table)


def print_journal(entries: list[dict]) -> None:
    if not entries:
        print_message("Journal", "No journal entries yet.", "grey50")
        return
    table = Table(title="Journal", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Date", width=20)
    table.add_column("Entry")
    for entry in entries:
        table.add_row(entry["date"], escape(entry["content"]))
    console.print(table)


def render_calendar(year: int, month: int, cells: list[date | None], relapse_dates: set[date], today: date | None = None) -> Table:
    """Month grid, Sunday first; relapse days in red, today underlined."""
    table = Table(
        title=f"{date(year, month, 1):%B %Y}",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold",
    )
    for header in WEEKDAY_HEADERS:
        table.add_column(header, justify="right", width=3)

    row: list[str] = []
    for cell in cells:
        if cell is None:
            row.append("")
        else:
            label = str(cell.day)
            if cell in relapse_dates:
                label = f"[bold red]{label}[/]"
            elif today is not None and cell == today:
                label = f"[underline]{label}[/]"
            row.append(label)
        if len(row) == 7:
            table.add_row(*row)
            row = []
    if row:
        row.extend([""] * (7 - len(row)))
        table.add_row(*row)
    return table


def print_analytics(data: dict) -> None:
    """Print summary numbers, the 6-month histogram and the relapse calendar."""
    lines: list[str] = [""]
    lines.append(f"  Avg Streak:     {data.get('avg_streak_days', 0)} days")
    lines.append(f"  Relapse Rate:   {data.get('relapse_rate', 0.0):.1f} / 30 days")
    lines.append(f"  Total Relapses: {data.get('total_relapses', 0)}")
    lines.append("")
    console.print(Panel("\n".join(lines), title="[bold]Analytics[/]", box=box.ROUNDED, border_style="cyan", width=50))

    histogram = data.get("monthly_histogram", [])
    if histogram:
        max_count = max((b["count"] for b in histogram), default=0) or 1
        hist_lines: list[str] = [""]
        for bucket in histogram:
            bar = _bar(bucket["count"], max_count, width=20)
            hist_lines.append(f"  {bucket['label']} {bucket['year']}  {bar} {bucket['count']}")
        hist_lines.append("")
        console.print(
            Panel("\n".join(hist_lines), title="[bold]Relapses per Month[/]", box=box.ROUNDED, border_style="blue", width=50)
        )

    calendar_data = data.get("calendar")
    if calendar_data:
        console.print(
            render_calendar(
                calendar_data["year"],
                calendar_data["month"],
                calendar_data["cells"],
                data.get("relapse_dates", set()),
                calendar_data.get("today"),
            )
        )


def print_posts(posts: list) -> None:
    """Print community feed posts with their comments."""
    if not posts:
        print_message("Community", "No posts yet.", "grey50")
        return
    for post in posts:
        lines: list[str] = [""]
        if post.content:
            lines.append(f"  {escape(post.content)}")
        if post.image:
            lines.append("  [grey50](image attached)[/]")
        for comment in post.comments:
            lines.append(f"    \U0001f4ac [bold]{escape(comment.user_name)}[/]: {escape(comment.content)}")
        lines.append("")
        console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]#{post.id} {escape(post.user_name)}[/]",
                subtitle=escape(post.created_at),
                box=box.ROUNDED,
                border_style="grey50",
                width=60,
            )
        )


def print_message(title: str, message: str, style: str = "grey50") -> None:
    """Print a short boxed message."""
    panel = Panel(
        f"\n  {message}\n",
        title=f"[bold]{title}[/]",
        box=box.ROUNDED,
        border_style=style,
        width=60,
    )
    console.print(panel)


def print_unlocked(badges: list[dict]) -> None:
    """Announce newly unlocked badges."""
    if not badges:
        return
    lines = [""] + [f"  {b['icon']} [bold]{b['name']}[/] - {b['description']}" for b in badges] + [""]
    console.print(
        Panel("\n".join(lines), title="[bold]New Badges![/]", box=box.ROUNDED, border_style="yellow", width=60)
    )
