from django.test import SimpleTestCase

from mediapipeline.backoff import next_poll_delay
from mediapipeline.platforms import Platform, extract_video_urls, get_platform_from_url


class PlatformDetectionTests(SimpleTestCase):

    def test_extracts_video_links_in_order(self):
        content = (
            "first https://www.tiktok.com/@user/video/12345 then "
            "https://example.com/article and https://youtu.be/abc123"
        )
        self.assertEqual(
            extract_video_urls(content),
            ["https://www.tiktok.com/@user/video/12345", "https://youtu.be/abc123"],
        )

    def test_plain_text_has_no_links(self):
        self.assertEqual(extract_video_urls("no links here"), [])
        self.assertEqual(extract_video_urls(""), [])

    def test_known_patterns(self):
        for url in [
            "https://www.instagram.com/reel/Cxyz/",
            "https://vm.tiktok.com/ZM123/",
            "https://x.com/someone/status/1700000000",
            "https://twitter.com/someone/status/1700000000",
            "https://www.youtube.com/shorts/abc",
        ]:
            with self.subTest(url=url):
                self.assertEqual(extract_video_urls(url), [url])

    def test_profile_pages_are_not_videos(self):
        self.assertEqual(extract_video_urls("https://www.instagram.com/someone/"), [])

    def test_platform_from_url(self):
        self.assertIs(get_platform_from_url("https://www.tiktok.com/@u/video/1"), Platform.TIKTOK)
        self.assertIs(get_platform_from_url("https://youtu.be/abc"), Platform.YOUTUBE)
        self.assertIs(get_platform_from_url("https://x.com/u/status/1"), Platform.TWITTER)
        self.assertIs(get_platform_from_url("https://instagr.am/p/1"), Platform.INSTAGRAM)
        self.assertIs(get_platform_from_url("https://vimeo.com/1"), Platform.UNKNOWN)

    def test_short_instagram_domain(self):
        urls = extract_video_urls("see https://instagr.am/p/ABC123/")
        self.assertEqual(urls, ["https://instagr.am/p/ABC123/"])
        self.assertIs(get_platform_from_url(urls[0]), Platform.INSTAGRAM)

    def test_labels(self):
        self.assertEqual(Platform.TWITTER.label, "X/Twitter")
        self.assertEqual(Platform.UNKNOWN.label, "Unknown")


class PollBackoffTests(SimpleTestCase):

    def test_grows_then_caps(self):
        self.assertEqual(next_poll_delay(0), 10)
        self.assertEqual(next_poll_delay(1), 12)
        self.assertEqual(next_poll_delay(10), 30)
        self.assertEqual(next_poll_delay(88), 30)

    def test_gives_up_after_last_attempt(self):
        self.assertIsNone(next_poll_delay(89))
        self.assertIsNone(next_poll_delay(200))

    def test_negative_attempt(self):
        with self.assertRaises(ValueError):
            next_poll_delay(-1)
