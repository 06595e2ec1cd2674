from rest_framework import serializers

from records.services.pages import SOURCES, SOURCE_GRANULAR


class SourceQuerySerializer(serializers.Serializer):
    source = serializers.ChoiceField(choices=list(SOURCES), required=False, default=SOURCE_GRANULAR)


class PreviewQuerySerializer(serializers.Serializer):
    # leaving source out previews both stores
    source = serializers.ChoiceField(choices=list(SOURCES), required=False, allow_null=True, default=None)


class GroupSelectionSerializer(serializers.Serializer):
    source = serializers.ChoiceField(choices=list(SOURCES), required=False, default=SOURCE_GRANULAR)
    groups = serializers.ListField(child=serializers.CharField(max_length=255), allow_empty=False,
                                   error_messages={'empty': 'Please select at least one group.'})


class PageSelectionSerializer(serializers.Serializer):
    keys = serializers.ListField(child=serializers.CharField(max_length=300), allow_empty=False,
                                 error_messages={'empty': 'Please select at least one page.'})


class BackupRequestSerializer(serializers.Serializer):
    startDate = serializers.DateField()
    endDate = serializers.DateField()
    source = serializers.ChoiceField(choices=list(SOURCES), required=False, default=SOURCE_GRANULAR)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    jobId = serializers.RegexField(r'^[A-Za-z0-9_-]{1,64}$', required=False)

    def validate(self, attrs):
        if attrs['endDate'] < attrs['startDate']:
            raise serializers.ValidationError({'endDate': 'End date must not be before start date.'})
        return attrs
