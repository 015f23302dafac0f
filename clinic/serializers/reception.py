import bleach
from rest_framework import serializers

from clinic.entities import ENTRY_IN_CONSULTATION, ENTRY_STATUS_CHOICES, PRIORITY_CHOICES


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class ReceptionCreateSerializer(serializers.Serializer):
    patientId = serializers.CharField(required=False, allow_blank=True, max_length=50)
    patientName = serializers.CharField(required=False, allow_blank=True, max_length=128)
    reason = serializers.CharField(max_length=255)
    priority = serializers.ChoiceField(choices=PRIORITY_CHOICES, default='low')
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_patientName(self, v):
        return _clean(v)

    def validate_reason(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('reason must not be empty')
        return v

    def validate_notes(self, v):
        return _clean(v)

    def validate(self, attrs):
        if not (attrs.get('patientId') or '').strip() and not attrs.get('patientName'):
            raise serializers.ValidationError({'patientName': 'patientId or patientName is required'})
        return attrs


class ReceptionUpdateSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)
    priority = serializers.ChoiceField(choices=PRIORITY_CHOICES, required=False)

    def validate_reason(self, v):
        return _clean(v)

    def validate_notes(self, v):
        return _clean(v)


class AssignDoctorSerializer(serializers.Serializer):
    doctorName = serializers.CharField(required=False, allow_blank=True, max_length=128)
    doctorId = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if not attrs.get('doctorId') and not (attrs.get('doctorName') or '').strip():
            raise serializers.ValidationError({'doctorName': 'doctorId or doctorName is required'})
        return attrs


class PrioritySerializer(serializers.Serializer):
    priority = serializers.ChoiceField(choices=PRIORITY_CHOICES)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ReceptionStatusSerializer(AssignDoctorSerializer):
    status = serializers.ChoiceField(choices=ENTRY_STATUS_CHOICES)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        # a doctor is only needed to start a consultation
        if attrs['status'] == ENTRY_IN_CONSULTATION:
            return super().validate(attrs)
        return attrs


class ReceptionListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, required=False)
