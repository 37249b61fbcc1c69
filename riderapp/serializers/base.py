import json

from rest_framework import serializers
from rest_framework.utils.encoders import JSONEncoder


class BackendPayloadSerializer(serializers.Serializer):
    """
    Input serializer whose validated data is forwarded to the backend.

    Dates and decimals are converted to their JSON forms so the payload can
    be sent as a request body.
    """

    def backend_payload(self):
        return json.loads(json.dumps(self.validated_data, cls=JSONEncoder))
