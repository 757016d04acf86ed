"""
Post Formatter
==============

Plain-text (Markdown-flavoured) rendering of posts for MCP tool results.
"""

from typing import Sequence

from ..ingestion.feed_normalizer import Post


def _categories(post: Post) -> str:
    return ", ".join(post.categories)


def format_post_entry(index: int, post: Post) -> str:
    """Numbered block used in result lists."""
    return (
        f"{index}. **{post.title}**\n"
        f"   URL: {post.link}\n"
        f"   Published: {post.published}\n"
        f"   Summary: {post.summary}\n"
        f"   Categories: {_categories(post)}\n"
    )


def format_post_list(posts: Sequence[Post]) -> str:
    return "\n".join(format_post_entry(i, post) for i, post in enumerate(posts, 1))


def format_search_results(keyword: str, posts: Sequence[Post]) -> str:
    return f'Found {len(posts)} posts matching "{keyword}":\n\n' + format_post_list(posts)


def format_recent_posts(posts: Sequence[Post]) -> str:
    return f"Recent {len(posts)} posts:\n\n" + format_post_list(posts)


def format_post_detail(post: Post) -> str:
    """Full view of a single post, including its raw content."""
    return (
        f"**{post.title}**\n\n"
        f"URL: {post.link}\n"
        f"Published: {post.published}\n"
        f"Updated: {post.updated}\n"
        f"Categories: {_categories(post)}\n\n"
        f"Content:\n{post.content}"
    )
