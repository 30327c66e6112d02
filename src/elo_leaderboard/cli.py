"""Command line interface for the Elo leaderboard.

Command structure:
    elo-leaderboard update EVENT_FILE   - Apply one merged pull request
    elo-leaderboard render              - Regenerate the Markdown report
    elo-leaderboard show                - Print the ranking

Typically invoked from a CI workflow on ``pull_request: closed`` events,
with the workflow serializing runs so two merges never race on the store.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import click

from .config import EloConfig
from .exceptions import EloLeaderboardError
from .models import PullRequestEvent, RepositoryContext
from .notifier import GitHubCommentNotifier
from .reporter import print_leaderboard
from .scorer import round_half_up
from .store import LeaderboardStore
from .updater import LeaderboardUpdater

logger = logging.getLogger(__name__)


def load_config(path: str | None) -> EloConfig:
    """Load a YAML config, or defaults when no path is given."""
    if path is None:
        return EloConfig()
    try:
        return EloConfig.from_yaml(path)
    except (FileNotFoundError, EloLeaderboardError) as e:
        raise click.ClickException(str(e)) from e


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def read_event(
    path: str,
    approved_reviews: int,
    changes_requested: int,
    linked_issues: int,
) -> PullRequestEvent:
    """Read an event file.

    Accepts either a flat event object or a GitHub webhook payload with a
    ``pull_request`` key. Review statistics are not part of the webhook
    payload, so they come from the command line in that case.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not read event file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise click.ClickException(f"Invalid event file: expected object, got {type(data).__name__}")

    try:
        if "pull_request" in data:
            return PullRequestEvent.from_github_pull_request(
                data["pull_request"],
                approved_reviews=approved_reviews,
                changes_requested=changes_requested,
                linked_issues=linked_issues,
            )
        return PullRequestEvent.from_payload(data)
    except EloLeaderboardError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(package_name="elo-leaderboard")
def cli():
    """Elo ratings for pull request contributors.

    \b
    Commands:
        update   Apply one merged pull request
        render   Regenerate the Markdown leaderboard
        show     Print the current ranking
    """
    pass


@cli.command("update")
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--repo",
    envvar="GITHUB_REPOSITORY",
    required=True,
    help="Repository as owner/name (defaults to $GITHUB_REPOSITORY)",
)
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--leaderboard", "leaderboard_path", default=None, help="Leaderboard JSON file")
@click.option("--markdown", "markdown_path", default=None, help="Markdown report file")
@click.option("--approved-reviews", type=click.IntRange(min=0), default=0, help="Approving reviews (webhook payloads only)")
@click.option("--changes-requested", type=click.IntRange(min=0), default=0, help="Change requests (webhook payloads only)")
@click.option("--linked-issues", type=click.IntRange(min=0), default=0, help="Linked issues (webhook payloads only)")
@click.option("--no-comment", is_flag=True, help="Do not post a comment on the pull request")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def update(
    event_file: str,
    repo: str,
    config_path: str | None,
    leaderboard_path: str | None,
    markdown_path: str | None,
    approved_reviews: int,
    changes_requested: int,
    linked_issues: int,
    no_comment: bool,
    verbose: bool,
):
    """Apply one merged pull request to the leaderboard.

    \b
    Arguments:
        EVENT_FILE: Flat event JSON or a GitHub pull_request webhook payload
    """
    config = load_config(config_path)
    configure_logging(verbose or config.features.verbose_logging)

    try:
        repository = RepositoryContext.from_slug(repo)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--repo") from e

    event = read_event(event_file, approved_reviews, changes_requested, linked_issues)

    notifier = None
    if not no_comment and config.features.post_pr_comment:
        try:
            notifier = GitHubCommentNotifier(repository)
        except EloLeaderboardError as e:
            logger.warning(f"Not posting a comment: {e}")

    updater = LeaderboardUpdater(
        config=config,
        store=LeaderboardStore(leaderboard_path or config.leaderboard.json_file),
        repository=repository,
        notifier=notifier,
        markdown_path=markdown_path,
    )
    try:
        result = updater.update(event)
    except EloLeaderboardError as e:
        raise click.ClickException(str(e)) from e
    finally:
        if notifier is not None:
            notifier.close()

    click.echo(
        f"{result.author}: {result.delta:+d} Elo -> {round_half_up(result.new_rating)} "
        f"(rank #{result.rank}, difficulty {result.difficulty})"
    )


@cli.command("render")
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--leaderboard", "leaderboard_path", default=None, help="Leaderboard JSON file")
@click.option("--markdown", "markdown_path", default=None, help="Markdown report file")
def render(config_path: str | None, leaderboard_path: str | None, markdown_path: str | None):
    """Regenerate the Markdown leaderboard from the JSON file."""
    config = load_config(config_path)
    updater = LeaderboardUpdater(
        config=config,
        store=LeaderboardStore(leaderboard_path or config.leaderboard.json_file),
        markdown_path=markdown_path,
    )
    try:
        updater.render()
    except EloLeaderboardError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Wrote {updater.markdown_path}")


@cli.command("show")
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--leaderboard", "leaderboard_path", default=None, help="Leaderboard JSON file")
def show(config_path: str | None, leaderboard_path: str | None):
    """Print the current ranking."""
    config = load_config(config_path)
    leaderboard = LeaderboardStore(leaderboard_path or config.leaderboard.json_file).load()
    if not leaderboard.contributors:
        click.echo("No contributors yet.")
        return
    print_leaderboard(leaderboard, config)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
