import unittest

from youtuply.models.video import VideoRef
from youtuply.services.links import extract_links, playlist_url, url_to_video_id


class ExtractLinksTests(unittest.TestCase):
    def test_short_and_long_urls_yield_the_same_id(self) -> None:
        urls = [
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ",
            "http://m.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        ]
        for url in urls:
            with self.subTest(url=url):
                refs = extract_links(f"check this out {url} !")
                self.assertEqual(refs, [VideoRef(url=url, video_id="dQw4w9WgXcQ")])
                self.assertEqual(url_to_video_id(url), "dQw4w9WgXcQ")

    def test_no_links(self) -> None:
        self.assertEqual(extract_links("no links here"), [])
        self.assertEqual(extract_links(""), [])

    def test_two_links_in_order_of_appearance(self) -> None:
        text = "first https://youtu.be/aaaaaaaaaaa then https://www.youtube.com/watch?v=bbbbbbbbbbb"
        refs = extract_links(text)
        self.assertEqual([ref.video_id for ref in refs], ["aaaaaaaaaaa", "bbbbbbbbbbb"])

    def test_case_insensitive_domain(self) -> None:
        refs = extract_links("HTTPS://WWW.YOUTUBE.COM/WATCH?V=dQw4w9WgXcQ")
        self.assertEqual(len(refs), 1)
        self.assertEqual(refs[0].video_id, "dQw4w9WgXcQ")

    def test_query_parameters_are_kept_in_url(self) -> None:
        url = "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ&t=42s"
        refs = extract_links(f"{url} nice")
        self.assertEqual(refs, [VideoRef(url=url, video_id="dQw4w9WgXcQ")])

    def test_other_domains_are_ignored(self) -> None:
        self.assertEqual(extract_links("https://vimeo.com/123456789 https://example.com/watch?v=x"), [])


class UrlToVideoIdTests(unittest.TestCase):
    def test_not_found_returns_none(self) -> None:
        self.assertIsNone(url_to_video_id("https://example.com/video"))
        self.assertIsNone(url_to_video_id("not a url"))
        self.assertIsNone(url_to_video_id(""))

    def test_playlist_url(self) -> None:
        self.assertEqual(
            playlist_url("PL123"), "https://www.youtube.com/playlist?list=PL123"
        )


if __name__ == "__main__":
    unittest.main()
