import unittest

from sdksig import HeaderMap, Request, ValidationError
from sdksig.canonical import (
    build_canonical_request,
    canonical_headers_string,
    canonical_path,
    canonical_query_string,
    signed_headers_string,
)


class TestCanonicalPath(unittest.TestCase):

    def test_paths(self) -> None:
        cases = {
            '': '/',
            '/': '/',
            '/foo': '/foo/',
            '/foo/': '/foo/',
            'foo': '/foo/',
            '/v1/donn\u00e9es': '/v1/donn%C3%A9es/',
            '/path/my%20file.txt': '/path/my%20file.txt/',
            '/p?x=1#frag': '/p/',
            '/a/~b*c': '/a/~b%2Ac/',
        }
        for path, expected in cases.items():
            with self.subTest(path=path):
                self.assertEqual(canonical_path(path), expected)

    def test_unparseable_path(self) -> None:
        for path in ['//[bad/path', '/a b', '/v1/res\t', '/%zz', '/trailing%', '/%4', '/a<b>', '/{id}']:
            with self.subTest(path=path):
                self.assertEqual(canonical_path(path), '/')


class TestCanonicalQueryString(unittest.TestCase):

    def test_values_and_names_sorted(self) -> None:
        self.assertEqual(
            canonical_query_string({'b': ['2'], 'a': ['2', '1']}),
            'a=1&a=2&b=2',
        )

    def test_sorted_bytewise(self) -> None:
        self.assertEqual(
            canonical_query_string({'b': ['1'], 'B': ['1'], 'a': ['x', 'X', '_']}),
            'B=1&a=X&a=_&a=x&b=1',
        )

    def test_encoded(self) -> None:
        self.assertEqual(
            canonical_query_string({'x y': ['a/b', '~*']}),
            'x%20y=a%2Fb&x%20y=~%2A',
        )

    def test_empty(self) -> None:
        self.assertEqual(canonical_query_string({}), '')
        self.assertEqual(canonical_query_string({'a': ['']}), 'a=')


class TestCanonicalHeaders(unittest.TestCase):

    def test_headers_string(self) -> None:
        headers = HeaderMap({'Host': 'example.com', 'X-Custom': '  v  '})

        self.assertEqual(
            canonical_headers_string(headers, ['host', 'x-custom', 'x-missing']),
            'host:example.com\nx-custom:v\nx-missing:\n',
        )

    def test_signed_headers_string(self) -> None:
        self.assertEqual(signed_headers_string(['Host', 'x-sdk-date']), 'host;x-sdk-date')
        self.assertEqual(signed_headers_string([]), '')


class TestBuildCanonicalRequest(unittest.TestCase):

    def test_post(self) -> None:
        request = Request(
            method='post',
            url='https://example.com/v1/items?tag=b&tag=a',
            headers={'Content-Type': 'application/json', 'Host': 'example.com'},
        )

        canonical = build_canonical_request(request, ['content-type', 'host'], 'abc123')

        self.assertEqual(
            canonical,
            'POST\n'
            '/v1/items/\n'
            'tag=a&tag=b\n'
            'content-type:application/json\n'
            'host:example.com\n'
            '\n'
            'content-type;host\n'
            'abc123'
        )

    def test_method_and_url_required(self) -> None:
        for request in [Request(url='https://example.com/'), Request(method='GET')]:
            with self.subTest(request=request):
                with self.assertRaises(ValidationError):
                    build_canonical_request(request, [], 'abc123')


if __name__ == '__main__':
    unittest.main(verbosity=2)
