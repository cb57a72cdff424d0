import pytest

from lakewatch.embed import process_embed_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.twitch.tv/lakecam", "https://player.twitch.tv/?channel=lakecam&parent=loz.watch&muted=false"),
        ("https://twitch.tv/lake_cam/", "https://player.twitch.tv/?channel=lake_cam&parent=loz.watch&muted=false"),
        ("https://www.twitch.tv/videos/123456", "https://player.twitch.tv/?video=123456&parent=loz.watch&muted=false"),
        (
            "https://clips.twitch.tv/FunnyClip-abc_1",
            "https://clips.twitch.tv/embed?clip=FunnyClip-abc_1&parent=loz.watch&muted=false",
        ),
        (
            "https://www.twitch.tv/lakecam/clip/Sunset-42",
            "https://clips.twitch.tv/embed?clip=Sunset-42&parent=loz.watch&muted=false",
        ),
        (
            "https://player.twitch.tv/?channel=lakecam&parent=old.example",
            "https://player.twitch.tv/?channel=lakecam&parent=loz.watch&muted=false",
        ),
    ],
)
def test_twitch_urls_become_player_embeds(url: str, expected: str) -> None:
    assert process_embed_url(url, parent="loz.watch") == expected


def test_existing_clip_embed_gets_parent_only() -> None:
    result = process_embed_url("https://clips.twitch.tv/embed?clip=Abc&parent=x", parent="loz.watch")
    assert result == "https://clips.twitch.tv/embed?clip=Abc&parent=loz.watch"


def test_non_twitch_urls_pass_through() -> None:
    youtube = "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert process_embed_url(youtube) == youtube
    assert process_embed_url("") == ""
    assert process_embed_url(None) is None


def test_default_parent_is_localhost() -> None:
    assert process_embed_url("https://www.twitch.tv/videos/9") == (
        "https://player.twitch.tv/?video=9&parent=localhost&muted=false"
    )
