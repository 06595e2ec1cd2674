import bleach
from rest_framework import serializers

from records.services.billing import TAB_ACTIVE, TAB_PARTIAL

TPA_CHOICES = ['All', 'Yes', 'No']


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class ActiveListQuerySerializer(serializers.Serializer):
    tab = serializers.ChoiceField(choices=[TAB_ACTIVE, TAB_PARTIAL], required=False, default=TAB_ACTIVE)
    ward = serializers.CharField(required=False, allow_blank=True, default='All', max_length=50)
    tpa = serializers.ChoiceField(choices=TPA_CHOICES, required=False, default='All')
    search = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)

    def validate_ward(self, v):
        return _clean(v) or 'All'

    def validate_search(self, v):
        return _clean(v)


class DischargedSearchSerializer(serializers.Serializer):
    phone = serializers.CharField(required=False, allow_blank=True, default='', max_length=20)
    uhid = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)
    name = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
    ward = serializers.CharField(required=False, allow_blank=True, default='All', max_length=50)
    tpa = serializers.ChoiceField(choices=TPA_CHOICES, required=False, default='All')

    def validate_phone(self, v):
        return _clean(v)

    def validate_uhid(self, v):
        return _clean(v)

    def validate_name(self, v):
        return _clean(v)

    def validate_ward(self, v):
        return _clean(v) or 'All'


class DateRangeSerializer(serializers.Serializer):
    startDate = serializers.DateField()
    endDate = serializers.DateField()

    def validate(self, attrs):
        if attrs['endDate'] < attrs['startDate']:
            raise serializers.ValidationError({'endDate': 'End date must not be before start date.'})
        return attrs
