"""Non-interactive output for pipes and scripts: plain text or JSON."""

import json

import click

from hnfeed.models import Item, User, flatten_comments
from hnfeed.textflow import strip_markup, wrap_paragraphs, wrap_text


PLAIN_WIDTH = 80


def format_story(index: int, item: Item) -> str:
    """Three lines per story: title, stats, link."""
    title = f"{index}. {item.title}"
    if item.hostname:
        title += f" ({item.hostname})"

    meta = f"   {item.score} points"
    if item.author:
        meta += f" by {item.author}"
    meta += f" {item.age} | {item.descendants} comments"

    return f"{title}\n{meta}\n   {item.link}"


def print_stories(items: list[Item]) -> None:
    if not items:
        click.echo("No stories found.")
        return
    for i, item in enumerate(items, 1):
        click.echo(format_story(i, item))
        click.echo()


def print_item(story: Item, comments: list[Item | None], width: int = PLAIN_WIDTH) -> None:
    """A story header, its text, then each visible first-level comment."""
    click.echo(story.title)
    if story.url:
        click.echo(story.url)
    click.echo(f"{story.score} points by {story.author} {story.age} | {story.descendants} comments")
    click.echo(story.permalink)

    if story.text:
        click.echo()
        for line in wrap_text(strip_markup(story.text), width - 2, "  "):
            click.echo(line)

    click.echo()
    click.echo("-" * min(width, 40))

    for node in flatten_comments(comments):
        if not node.is_visible:
            continue
        click.echo()
        click.echo(f"{node.item.author} {node.item.age}")
        for line in wrap_paragraphs(strip_markup(node.item.text), width - 4):
            click.echo(f"    {line}" if line else "")


def print_user(user: User, items: list[Item], width: int = PLAIN_WIDTH) -> None:
    click.echo(f"{user.id} ({user.karma} karma, joined {user.joined})")
    click.echo(user.profile_url)

    if user.about:
        click.echo()
        for line in wrap_text(strip_markup(user.about), width - 2, "  "):
            click.echo(line)

    if items:
        click.echo()
        click.echo("Recent submissions:")
        click.echo()
        print_stories(items)


def print_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def item_json(story: Item, comments: list[Item | None]) -> dict:
    """The story record with its loaded comments inlined."""
    data = story.to_json()
    data["comments"] = [c.to_json() for c in comments if c is not None and c.is_visible]
    return data


def user_json(user: User, items: list[Item]) -> dict:
    return {
        "id": user.id,
        "created": user.created,
        "karma": user.karma,
        "about": user.about,
        "submissions": [item.to_json() for item in items],
    }
