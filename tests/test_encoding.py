import unittest

from sdksig import EncodingError
from sdksig.encoding import url_encode


class TestUrlEncode(unittest.TestCase):

    def test_protocol_rewrites(self) -> None:
        cases = {
            'hello world': 'hello%20world',
            'a*b': 'a%2Ab',
            'a~b': 'a~b',
            'a+b': 'a%2Bb',
            '100%': '100%25',
            'k=v&x': 'k%3Dv%26x',
            'abcXYZ019-_.': 'abcXYZ019-_.',
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(url_encode(raw), expected)

    def test_slash_kept_in_path(self) -> None:
        self.assertEqual(url_encode('/v1/my res', is_path=True), '/v1/my%20res')

    def test_slash_encoded_in_query(self) -> None:
        self.assertEqual(url_encode('a/b'), 'a%2Fb')

    def test_none_is_empty(self) -> None:
        self.assertEqual(url_encode(None), '')
        self.assertEqual(url_encode(None, is_path=True), '')

    def test_utf8(self) -> None:
        self.assertEqual(url_encode('é'), '%C3%A9')

    def test_bytes(self) -> None:
        self.assertEqual(url_encode(b'a b*'), 'a%20b%2A')

    def test_unencodable_raises(self) -> None:
        with self.assertRaises(EncodingError):
            url_encode('\ud800')


if __name__ == '__main__':
    unittest.main(verbosity=2)
