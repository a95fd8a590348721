"""
Serializers for PropDesk Work Orders.

Handles:
- Work order create/edit validation, including the per-type details
- List and detail representations with derived flags
- Transition and photo requests
"""

from rest_framework import serializers

from authentication.models import User
from .details import (
    WorkType, JobCategory, RecurrenceRule, build_details, field_names,
)
from .models import Asset, WorkOrder, WorkOrderPhoto, WorkOrderPriority


# =============================================================================
# TYPE-SPECIFIC DETAILS
# =============================================================================

class PreventiveDetailsSerializer(serializers.Serializer):
    recurrence_rule = serializers.ChoiceField(
        choices=RecurrenceRule.CHOICES,
        required=False,
        allow_blank=True
    )
    recurrence_start_date = serializers.DateField(required=False, allow_null=True)
    recurrence_end_date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        start = attrs.get('recurrence_start_date')
        end = attrs.get('recurrence_end_date')
        if start and end and end < start:
            raise serializers.ValidationError({
                'recurrence_end_date': 'Recurrence end date cannot be before the start date.'
            })
        return attrs


class ComplaintDetailsSerializer(serializers.Serializer):
    pass


class ContactDetailsSerializer(serializers.Serializer):
    contact_person = serializers.CharField(max_length=150, required=False, allow_blank=True)
    contact_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    contact_email = serializers.EmailField(required=False, allow_blank=True)


class JobDetailsSerializer(ContactDetailsSerializer):
    job_type = serializers.ChoiceField(
        choices=JobCategory.CHOICES,
        required=False
    )
    service_provider = serializers.CharField(max_length=200, required=False, allow_blank=True)


class RepairDetailsSerializer(ContactDetailsSerializer):
    unit_number = serializers.CharField(max_length=50, required=False, allow_blank=True)


DETAILS_SERIALIZERS = {
    WorkType.PREVENTIVE: PreventiveDetailsSerializer,
    WorkType.COMPLAINT: ComplaintDetailsSerializer,
    WorkType.JOB: JobDetailsSerializer,
    WorkType.REPAIR: RepairDetailsSerializer,
}


def validate_details(work_type, data, base=None):
    """
    Validate a details payload against the variant of `work_type`.

    `base` holds the currently stored values when editing; the payload is
    merged over it. Returns the variant instance.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise serializers.ValidationError('Details must be an object.')

    allowed = field_names(work_type)
    foreign = sorted(set(data) - set(allowed))
    if foreign:
        raise serializers.ValidationError({
            name: f'Not applicable to {dict(WorkType.CHOICES)[work_type]} work orders.'
            for name in foreign
        })

    serializer = DETAILS_SERIALIZERS[work_type](data={**(base or {}), **data})
    if not serializer.is_valid():
        raise serializers.ValidationError(serializer.errors)
    return build_details(work_type, serializer.validated_data)


# =============================================================================
# WRITE SERIALIZERS
# =============================================================================

class WorkOrderCreateSerializer(serializers.Serializer):
    """
    Validates a new work order.

    Title, due date and asset are required; the work type picks which
    details are accepted.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    work_type = serializers.ChoiceField(choices=WorkType.CHOICES)
    priority = serializers.ChoiceField(
        choices=WorkOrderPriority.CHOICES,
        default=WorkOrderPriority.MEDIUM
    )
    asset = serializers.PrimaryKeyRelatedField(queryset=Asset.objects.all())
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False,
        allow_null=True,
        default=None
    )
    due_date = serializers.DateField()
    details = serializers.JSONField(required=False, default=dict)

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title cannot be blank.')
        return value

    def validate(self, attrs):
        try:
            attrs['details'] = validate_details(attrs['work_type'], attrs.get('details'))
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({'details': exc.detail})
        return attrs


class WorkOrderUpdateSerializer(serializers.Serializer):
    """
    Validates an edit. Status and work type are not editable: status moves
    only through a transition, work type is fixed at creation.
    """

    READ_ONLY_FIELDS = {
        'status': 'Status can only change through a transition.',
        'work_type': 'Work type cannot be changed after creation.',
        'work_order_number': 'Work order number cannot be changed.',
        'location': 'Location is derived from the asset.',
        'requested_by': 'Requester cannot be changed.',
    }

    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.ChoiceField(choices=WorkOrderPriority.CHOICES, required=False)
    asset = serializers.PrimaryKeyRelatedField(queryset=Asset.objects.all(), required=False)
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True),
        required=False,
        allow_null=True
    )
    due_date = serializers.DateField(required=False)
    details = serializers.JSONField(required=False)

    def to_internal_value(self, data):
        rejected = {
            name: message for name, message in self.READ_ONLY_FIELDS.items()
            if name in data
        }
        if rejected:
            raise serializers.ValidationError(rejected)
        return super().to_internal_value(data)

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title cannot be blank.')
        return value

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No changes supplied.')

        if 'details' in attrs:
            work_order = self.context['work_order']
            try:
                attrs['details'] = validate_details(
                    work_order.work_type, attrs['details'], base=work_order.details
                )
            except serializers.ValidationError as exc:
                raise serializers.ValidationError({'details': exc.detail})
        return attrs


class TransitionSerializer(serializers.Serializer):
    """Request body for a status change."""

    status = serializers.CharField(max_length=20)
    staged_photos = serializers.ListField(
        child=serializers.URLField(max_length=1000),
        required=False,
        default=list,
        help_text="Photo URLs uploaded with this request; attached only if the move succeeds"
    )


class PhotoCreateSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=1000)


# =============================================================================
# READ SERIALIZERS
# =============================================================================

class WorkOrderPhotoSerializer(serializers.ModelSerializer):
    uploaded_by_name = serializers.SerializerMethodField()

    class Meta:
        model = WorkOrderPhoto
        fields = ['id', 'work_order', 'url', 'uploaded_by', 'uploaded_by_name', 'created_at']
        read_only_fields = fields

    def get_uploaded_by_name(self, obj):
        return obj.uploaded_by.display_name if obj.uploaded_by else None


class WorkOrderListSerializer(serializers.ModelSerializer):
    """Lightweight row for the work order table."""

    status_display = serializers.CharField(source='get_status_display', read_only=True)
    priority_display = serializers.CharField(source='get_priority_display', read_only=True)
    work_type_display = serializers.CharField(source='get_work_type_display', read_only=True)
    asset_name = serializers.CharField(source='asset.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    assigned_to_name = serializers.SerializerMethodField()
    is_due_soon = serializers.BooleanField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    is_new = serializers.BooleanField(read_only=True)

    class Meta:
        model = WorkOrder
        fields = [
            'id',
            'work_order_number',
            'title',
            'work_type',
            'work_type_display',
            'status',
            'status_display',
            'priority',
            'priority_display',
            'asset',
            'asset_name',
            'location',
            'location_name',
            'assigned_to',
            'assigned_to_name',
            'requested_by',
            'due_date',
            'is_due_soon',
            'is_overdue',
            'is_new',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_assigned_to_name(self, obj):
        return obj.assigned_to.display_name if obj.assigned_to else None


class WorkOrderDetailSerializer(WorkOrderListSerializer):
    """Full work order including details, photos and enabled actions."""

    requested_by_name = serializers.SerializerMethodField()
    photos = WorkOrderPhotoSerializer(many=True, read_only=True)
    available_actions = serializers.SerializerMethodField()

    class Meta(WorkOrderListSerializer.Meta):
        fields = WorkOrderListSerializer.Meta.fields + [
            'description',
            'details',
            'requested_by_name',
            'photos',
            'available_actions',
        ]
        read_only_fields = fields

    def get_requested_by_name(self, obj):
        return obj.requested_by.display_name if obj.requested_by else None

    def get_available_actions(self, obj):
        return obj.get_available_actions()

