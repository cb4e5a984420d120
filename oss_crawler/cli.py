"""
Command line interface for oss-crawler.

Every command prints the fetched records to stdout as JSON Lines, in input
order. Logs go to stderr.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

import typer
from typing_extensions import Annotated

from oss_crawler.config import CrawlerConfig
from oss_crawler.exceptions import CrawlerError
from oss_crawler.github import GitHubClient
from oss_crawler.inputs import iter_keys, parse_id
from oss_crawler.logging_setup import setup_logging
from oss_crawler.ossinsight import OssInsightClient, Period
from oss_crawler.output import JsonLinesWriter


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="oss-crawler",
    help="Crawl GitHub and OSS Insight, printing records as JSON lines.",
    add_completion=False,
)
crawler_app = typer.Typer(help="Information crawler.")
github_app = typer.Typer(help="Crawler for GitHub.")
ossinsight_app = typer.Typer(help="Crawler for OSS Insight.")

app.add_typer(crawler_app, name="crawler")
crawler_app.add_typer(github_app, name="github")
crawler_app.add_typer(ossinsight_app, name="ossinsight")


StdinOption = Annotated[bool, typer.Option("--stdin", help="Read keys from stdin.")]
IdOption = Annotated[bool, typer.Option("--id", help="By id.")]


@contextmanager
def _crawl_errors() -> Iterator[None]:
    """Turn an unrecoverable crawler error into exit code 1."""
    try:
        yield
    except CrawlerError as e:
        logger.debug("Crawl aborted", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _choose_api(by_name: bool, by_id: bool, name_flag: str) -> bool:
    """Validate the key-space flags; returns True when keys are numeric ids."""
    if by_name == by_id:
        raise typer.BadParameter(
            f"exactly one of {name_flag} or --id is required",
            param_hint=f"'{name_flag}' / '--id'",
        )
    return by_id


def _keys(stdin: bool, keys: Optional[List[str]]) -> Iterator[str]:
    if stdin and keys:
        raise typer.BadParameter(
            "cannot be combined with KEY arguments", param_hint="'--stdin'"
        )
    return iter_keys(stdin, keys or [])


def _lookup_each(
    keys: Iterator[str],
    use_id: bool,
    by_name: Callable[[str], Any],
    by_id: Callable[[int], Any],
) -> None:
    writer = JsonLinesWriter()
    with _crawl_errors():
        for key in keys:
            writer.write(by_id(parse_id(key)) if use_id else by_name(key))
    logger.info(f"Wrote {writer.count} records")


def _github(ctx: typer.Context) -> GitHubClient:
    return GitHubClient(config=ctx.obj)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="Logging level (default: INFO).")
    ] = None,
    min_delay: Annotated[
        Optional[float], typer.Option("--min-delay", help="Minimum backoff delay in seconds.")
    ] = None,
    max_delay: Annotated[
        Optional[float], typer.Option("--max-delay", help="Maximum backoff delay in seconds.")
    ] = None,
    timeout: Annotated[
        Optional[float], typer.Option("--timeout", help="Per-request timeout in seconds.")
    ] = None,
    max_attempts: Annotated[
        Optional[int],
        typer.Option("--max-attempts", help="Give up after N attempts (default: retry forever)."),
    ] = None,
):
    """Crawl GitHub and OSS Insight, printing records as JSON lines."""
    try:
        config = CrawlerConfig.from_env()
        if log_level is not None:
            config.log_level = log_level
        if min_delay is not None:
            config.min_delay = min_delay
        if max_delay is not None:
            config.max_delay = max_delay
        if timeout is not None:
            config.timeout = timeout
        if max_attempts is not None:
            config.max_attempts = max_attempts
        config.validate()
        setup_logging(log_level=config.log_level, log_file=config.log_file)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    logger.debug(
        f"Config: min_delay={config.min_delay}s, max_delay={config.max_delay}s, "
        f"timeout={config.timeout}s, max_attempts={config.max_attempts}, "
        f"token={'set' if config.github_token else 'unset'}"
    )
    ctx.obj = config


@github_app.callback()
def github_callback(
    ctx: typer.Context,
    token: Annotated[Optional[str], typer.Option("--token", help="GitHub token.")] = None,
):
    """Crawler for GitHub."""
    if token:
        ctx.obj.github_token = token


@github_app.command()
def stargazers(
    ctx: typer.Context,
    full_name: Annotated[str, typer.Argument(help="Repository full name (owner/repo).")],
):
    """Prints stargazers of the repo as JSON lines."""
    writer = JsonLinesWriter()
    with _github(ctx) as github, _crawl_errors():
        writer.write_all(github.iter_stargazers(full_name))
    logger.info(f"Wrote {writer.count} stargazers of {full_name}")


@github_app.command()
def repo(
    ctx: typer.Context,
    full_name: Annotated[bool, typer.Option("--full-name", help="By full_name.")] = False,
    by_id: IdOption = False,
    stdin: StdinOption = False,
    key: Annotated[Optional[List[str]], typer.Argument(help="List of full_name or id.")] = None,
):
    """Prints repositories as JSON lines."""
    use_id = _choose_api(full_name, by_id, "--full-name")
    keys = _keys(stdin, key)
    with _github(ctx) as github:
        _lookup_each(keys, use_id, github.repo, github.repo_by_id)


@github_app.command()
def readme(
    ctx: typer.Context,
    full_name: Annotated[bool, typer.Option("--full-name", help="By full_name.")] = False,
    by_id: IdOption = False,
    stdin: StdinOption = False,
    key: Annotated[Optional[List[str]], typer.Argument(help="List of full_name or id.")] = None,
):
    """Prints README of the repositories as JSON lines."""
    use_id = _choose_api(full_name, by_id, "--full-name")
    keys = _keys(stdin, key)
    with _github(ctx) as github:
        _lookup_each(keys, use_id, github.readme, github.readme_by_id)


@github_app.command()
def user(
    ctx: typer.Context,
    login: Annotated[bool, typer.Option("--login", help="By login.")] = False,
    by_id: IdOption = False,
    stdin: StdinOption = False,
    key: Annotated[Optional[List[str]], typer.Argument(help="List of login or id.")] = None,
):
    """Prints user profiles as JSON lines."""
    use_id = _choose_api(login, by_id, "--login")
    keys = _keys(stdin, key)
    with _github(ctx) as github:
        _lookup_each(keys, use_id, github.user, github.user_by_id)


@ossinsight_app.callback()
def ossinsight_callback():
    """Crawler for OSS Insight."""


@ossinsight_app.command()
def trends(
    ctx: typer.Context,
    period: Annotated[Period, typer.Option("--period", help="Period of trending repositories.")],
    stdin: StdinOption = False,
    lang: Annotated[Optional[List[str]], typer.Argument(help="List of languages.")] = None,
):
    """Trending repositories."""
    keys = _keys(stdin, lang)
    writer = JsonLinesWriter()
    with OssInsightClient(config=ctx.obj) as ossinsight, _crawl_errors():
        for language in keys:
            writer.write(ossinsight.trends(period, language))
    logger.info(f"Wrote {writer.count} trend lists")


def main() -> None:
    """Entry point for the ``oss-crawler`` script."""
    app()


if __name__ == "__main__":
    main()
