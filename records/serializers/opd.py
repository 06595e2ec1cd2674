import bleach
from rest_framework import serializers

from records.services.appointments import TABS, TAB_TODAY


class AppointmentListQuerySerializer(serializers.Serializer):
    tab = serializers.ChoiceField(choices=list(TABS), required=False, default=TAB_TODAY)
    search = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)

    def validate_search(self, v):
        return bleach.clean((v or '').strip(), strip=True)
