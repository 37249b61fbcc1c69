"""Utility methods for console testing."""

from unittest.mock import MagicMock

from riderapp.session import IDENTITY_KEY, REFRESH_TOKEN_KEY, TOKEN_KEY


class ConsoleTestUtils:

    @staticmethod
    def login(client, role='admin', email=None, refresh_token='refresh-token'):
        """Store an authenticated console session on the test client."""
        session = client.session
        session[TOKEN_KEY] = 'access-token'
        if refresh_token:
            session[REFRESH_TOKEN_KEY] = refresh_token
        session[IDENTITY_KEY] = {'email': email or f'{role}@example.com', 'role': role}
        session.save()

    @staticmethod
    def backend_response(status_code=200, json_data=None, content=None):
        """Build a stand-in for a requests.Response."""
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        if content is None:
            content = b'' if json_data is None else b'{...}'
        response.content = content
        if json_data is None:
            response.json.side_effect = ValueError('No JSON')
        else:
            response.json.return_value = json_data
        response.text = content.decode('utf-8', errors='ignore') if isinstance(content, bytes) else str(content)
        return response
