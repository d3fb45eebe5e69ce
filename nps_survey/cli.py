from typing import Optional
import typer
import asyncio
import logging
from typing_extensions import Annotated
from rich.console import Console
from rich.table import Table

from nps_survey.client.survey_client import SurveyClient, friendly_message
from nps_survey.domains import SurveyError, SurveyRequest, SurveyValidationError

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer()
console = Console()

DEFAULT_URL = "http://localhost:8080"


def render_stats(client: SurveyClient) -> None:
    """Print cached analytics as rich tables."""
    summary = Table(title="Survey analytics")
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("NPS", f"{client.nps:.2f}")
    summary.add_row("Average rating", f"{client.average:.2f}")
    console.print(summary)

    distribution = Table(title="Rating distribution")
    distribution.add_column("Rating", justify="right")
    distribution.add_column("Responses", justify="right")
    for rating in range(11):
        distribution.add_row(str(rating), str(client.distribution.get(rating, 0)))
    console.print(distribution)

    for name, state in client.states.items():
        if state.error:
            console.print(f"[bold red]{name}:[/bold red] {state.error}")


async def submit_and_report(url: str, request: SurveyRequest) -> int:
    async with SurveyClient(url) as client:
        try:
            created = await client.submit_survey(request)
        except SurveyValidationError as e:
            for field, messages in e.field_errors.items():
                for message in messages:
                    console.print(f"[bold red]{field}:[/bold red] {message}")
            return 1
        except SurveyError as e:
            console.print(f"[bold red]Error:[/bold red] {friendly_message(e)}")
            return 1

        console.print(f"[green]Feedback submitted![/green] [dim]id={created.id}[/dim]")
        render_stats(client)
        return 0


async def fetch_and_report(url: str) -> int:
    async with SurveyClient(url) as client:
        await client.refresh_analytics()
        render_stats(client)
        return 1 if any(state.error for state in client.states.values()) else 0


@app.command()
def serve(
    config: Annotated[
        str, typer.Option(help="Path to the configuration JSON or Python file.")
    ] = "config.json",
    host: Annotated[Optional[str], typer.Option(help="Bind address.")] = None,
    port: Annotated[Optional[int], typer.Option(help="Bind port.")] = None,
):
    """
    Run the survey HTTP API.
    """
    import uvicorn

    from nps_survey.api import create_app
    from nps_survey.factories.survey_factory import SurveyFactory, load_config

    try:
        with console.status("[bold green]Connecting to storage...", spinner="dots"):
            loaded = load_config(config)
            services = SurveyFactory.create_from_config(loaded)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)

    api_config = loaded.get("api", {})
    try:
        uvicorn.run(
            create_app(services),
            host=host or api_config.get("host", "0.0.0.0"),
            port=port or int(api_config.get("port", 8080)),
        )
    finally:
        services.close()


@app.command()
def submit(
    rating: Annotated[int, typer.Option(help="Likelihood to recommend, 0-10.")],
    comments: Annotated[Optional[str], typer.Option(help="Optional comment.")] = None,
    email: Annotated[Optional[str], typer.Option(help="Optional contact email.")] = None,
    url: Annotated[str, typer.Option(help="Base URL of the survey API.")] = DEFAULT_URL,
):
    """
    Submit a survey response and show the refreshed analytics.
    """
    request = SurveyRequest(likelihood_to_recommend=rating, comments=comments, email=email)
    raise typer.Exit(code=asyncio.run(submit_and_report(url, request)))


@app.command()
def stats(
    url: Annotated[str, typer.Option(help="Base URL of the survey API.")] = DEFAULT_URL,
):
    """
    Show NPS, average rating and rating distribution.
    """
    raise typer.Exit(code=asyncio.run(fetch_and_report(url)))


if __name__ == "__main__":
    app()
