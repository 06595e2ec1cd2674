from django.core.exceptions import SuspiciousFileOperation
from django.utils.text import get_valid_filename
from rest_framework import serializers

MISSING = 'Missing required fields.'


class DPRSendSerializer(serializers.Serializer):
    pdfFile = serializers.FileField(error_messages={'required': MISSING, 'invalid': MISSING, 'empty': MISSING})
    caption = serializers.CharField(max_length=1000, error_messages={'required': MISSING, 'blank': MISSING})
    filename = serializers.CharField(max_length=200, error_messages={'required': MISSING, 'blank': MISSING})

    def validate_filename(self, v):
        try:
            name = get_valid_filename(v.rsplit('/', 1)[-1])
        except SuspiciousFileOperation:
            raise serializers.ValidationError('Invalid filename.')
        if not name.lower().endswith('.pdf'):
            name += '.pdf'
        return name
