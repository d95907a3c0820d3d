"""
Unit tests for request enrichment extraction.
"""

from unittest.mock import Mock

import pytest

from servicelog.request import (
    AddressParseFailure,
    RequestInfo,
    extract_request_info,
    is_ip_literal,
    join_host_port,
    split_host_port,
)


class TestSplitHostPort:
    """Test split_host_port function"""

    @pytest.mark.parametrize('hostport,expected', [
        ('127.0.0.1:8080', ('127.0.0.1', '8080')),
        ('localhost:80', ('localhost', '80')),
        ('[::1]:443', ('::1', '443')),
        ('[fe80::1%eth0]:22', ('fe80::1%eth0', '22')),
        (':80', ('', '80')),
    ])
    def test_valid(self, hostport, expected):
        """Should split host and port"""
        assert split_host_port(hostport) == expected

    @pytest.mark.parametrize('hostport', [
        'not-an-address',
        '',
        '::1:80',
        '[::1]',
        '[::1',
        '[::1]x:80',
        '[::1]:80]',
    ])
    def test_invalid(self, hostport):
        """Should raise AddressParseFailure"""
        with pytest.raises(AddressParseFailure):
            split_host_port(hostport)

    def test_join_round_trip(self):
        """Should bracket IPv6 hosts when joining"""
        assert join_host_port('::1', 80) == '[::1]:80'
        assert join_host_port('10.0.0.1', '80') == '10.0.0.1:80'
        assert split_host_port(join_host_port('::1', 80)) == ('::1', '80')

    @pytest.mark.parametrize('value,expected', [
        ('192.0.2.1', True),
        ('::1', True),
        ('192.0.2.1:80', False),
        ('unix-socket', False),
    ])
    def test_is_ip_literal(self, value, expected):
        """Should recognise bare IPv4 and IPv6 addresses only"""
        assert is_ip_literal(value) is expected


class TestExtractRequestInfo:
    """Test extract_request_info function"""

    def test_from_environ(self):
        """Should read headers and peer address from a WSGI environ"""
        info = extract_request_info({
            'REMOTE_ADDR': '192.0.2.1',
            'REMOTE_PORT': '5000',
            'HTTP_X_REQUEST_ID': 'req-1',
            'HTTP_X_FORWARDED_FOR': '198.51.100.7',
        })

        assert info == RequestInfo(
            request_id='req-1',
            remote_addr='192.0.2.1:5000',
            forwarded_for='198.51.100.7',
        )

    def test_from_request_object(self):
        """Should use the environ of a Flask/Werkzeug request"""
        request = Mock(environ={'REMOTE_ADDR': '192.0.2.1', 'REMOTE_PORT': '5000'})

        info = extract_request_info(request)

        assert info.remote_addr == '192.0.2.1:5000'
        assert info.request_id is None
        assert info.forwarded_for is None

    def test_address_without_port(self):
        """Should pass the bare address through when no port is known"""
        info = extract_request_info({'REMOTE_ADDR': '192.0.2.1'})

        assert info.remote_addr == '192.0.2.1'

    def test_empty_headers_are_absent(self):
        """Should treat empty header values as missing"""
        info = extract_request_info({'HTTP_X_REQUEST_ID': '', 'HTTP_X_FORWARDED_FOR': ''})

        assert info == RequestInfo()

    def test_request_info_passthrough(self):
        """Should return RequestInfo unchanged"""
        info = RequestInfo(request_id='abc')

        assert extract_request_info(info) is info
