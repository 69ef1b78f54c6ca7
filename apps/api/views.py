"""
RESTful API for the complaint service.

Viewsets are thin: they parse input, call the lifecycle/remark services with
the logged-in user as actor, and serialize the result. Role and state rules
live in the services; errors are shaped by ``apps.api.exceptions``.
"""

from django.db import transaction
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.accounts.models import User
from apps.accounts.permissions import IsComplaintAdmin, IsCustomer, IsTechnician
from apps.catalog.models import Brand, Category, State, Subcategory
from apps.complaints import storage
from apps.complaints.filters import ComplaintFilter
from apps.complaints.models import Complaint, ForwardRecord, Remark
from apps.complaints.services import lifecycle_service, remark_service, stats_service
from apps.core.exceptions import ValidationError


class ComplaintPagination(PageNumberPagination):
    page_size = 25
    page_size_query_param = 'page_size'
    max_page_size = 100


def validated(serializer):
    """Run DRF field validation, reporting failures as a service ValidationError."""
    if not serializer.is_valid():
        raise ValidationError("The submitted data is invalid.", field_errors=serializer.errors)
    return serializer.validated_data


# Serializers
class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'role']
        read_only_fields = fields


class RemarkSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = Remark
        fields = [
            'id', 'complaint', 'author', 'author_role', 'status',
            'transport_note', 'checking_note', 'remark', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ForwardRecordSerializer(serializers.ModelSerializer):
    previous_assignee = UserSummarySerializer(read_only=True)
    new_assignee = UserSummarySerializer(read_only=True)
    forwarded_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ForwardRecord
        fields = ['id', 'previous_assignee', 'new_assignee', 'forwarded_by', 'created_at']
        read_only_fields = fields


class ComplaintListSerializer(serializers.ModelSerializer):
    """Row shape for complaint lists."""

    customer = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    category = serializers.CharField(source='category.name', read_only=True)
    subcategory = serializers.CharField(source='subcategory.name', read_only=True)
    brand = serializers.CharField(source='brand.name', read_only=True)
    state = serializers.CharField(source='state.name', read_only=True)
    is_forwarded = serializers.BooleanField(read_only=True)

    class Meta:
        model = Complaint
        fields = [
            'id', 'report_number', 'customer', 'category', 'subcategory', 'brand',
            'model_no', 'state', 'warranty_status', 'status', 'assigned_to',
            'is_forwarded', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ComplaintDetailSerializer(ComplaintListSerializer):
    """Full complaint with its remark ledger (oldest first) and forward history."""

    warranty_file_url = serializers.SerializerMethodField()
    receipt_file_url = serializers.SerializerMethodField()
    transport_note = serializers.CharField(source='current_transport_note', read_only=True)
    checking_note = serializers.CharField(source='current_checking_note', read_only=True)
    remarks = serializers.SerializerMethodField()
    forward_history = ForwardRecordSerializer(many=True, read_only=True)

    class Meta(ComplaintListSerializer.Meta):
        fields = ComplaintListSerializer.Meta.fields + [
            'details', 'warranty_file_url', 'receipt_file_url',
            'transport_note', 'checking_note', 'remarks', 'forward_history'
        ]
        read_only_fields = fields

    def get_warranty_file_url(self, obj):
        return storage.attachment_url(obj.warranty_file)

    def get_receipt_file_url(self, obj):
        return storage.attachment_url(obj.receipt_file)

    def get_remarks(self, obj):
        return RemarkSerializer(remark_service.list_remarks(obj), many=True).data


class ComplaintCreateSerializer(serializers.Serializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.filter(is_active=True))
    subcategory = serializers.PrimaryKeyRelatedField(queryset=Subcategory.objects.filter(is_active=True))
    brand = serializers.PrimaryKeyRelatedField(queryset=Brand.objects.filter(is_active=True))
    state = serializers.PrimaryKeyRelatedField(queryset=State.objects.filter(is_active=True))
    model_no = serializers.CharField(max_length=100, required=False, allow_blank=True)
    warranty_status = serializers.ChoiceField(choices=Complaint.WARRANTY_CHOICES)
    details = serializers.CharField(trim_whitespace=False)
    warranty_file = serializers.FileField(required=False, allow_null=True)
    receipt_file = serializers.FileField(required=False, allow_null=True)


class ForwardSerializer(serializers.Serializer):
    technician_id = serializers.IntegerField()
    # Checked against the complaint's current status by the service.
    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RemarkInputSerializer(serializers.Serializer):
    """Status and note fields; every one optional, at least one required by the service."""

    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    transport_note = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    checking_note = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    remark = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)


# ViewSets
class ComplaintViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Complaints scoped to the caller: admins see all, technicians their
    assignments, customers their own submissions.
    """

    serializer_class = ComplaintListSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ComplaintPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ComplaintFilter
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return lifecycle_service.complaints_visible_to(self.request.user).order_by('-updated_at', '-id')

    def get_permissions(self):
        if self.action == 'create':
            return [IsCustomer()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == 'create':
            return ComplaintCreateSerializer
        if self.action == 'forward':
            return ForwardSerializer
        if self.action == 'remarks':
            return RemarkInputSerializer
        if self.action in ('retrieve', 'cancel'):
            return ComplaintDetailSerializer
        return ComplaintListSerializer

    def _detail(self, complaint, status_code=status.HTTP_200_OK):
        return Response(ComplaintDetailSerializer(complaint).data, status=status_code)

    def create(self, request):
        data = validated(ComplaintCreateSerializer(data=request.data))
        complaint = lifecycle_service.create_complaint(actor=request.user, **data)
        return self._detail(complaint, status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        complaint = lifecycle_service.get_complaint_for_actor(actor=request.user, complaint_id=pk)
        return self._detail(complaint)

    @action(detail=True, methods=['post'])
    def forward(self, request, pk=None):
        """Assign (or reassign) the complaint to a technician."""
        data = validated(ForwardSerializer(data=request.data))
        complaint = lifecycle_service.forward_complaint(
            actor=request.user,
            complaint_id=pk,
            technician_id=data['technician_id'],
            status=data.get('status'),
        )
        return self._detail(complaint)

    @action(detail=True, methods=['post'])
    def remarks(self, request, pk=None):
        """Add a remark, optionally moving the status forward."""
        data = validated(RemarkInputSerializer(data=request.data))
        entry = lifecycle_service.update_complaint(actor=request.user, complaint_id=pk, **data)
        return Response(RemarkSerializer(entry).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        complaint = lifecycle_service.cancel_complaint(actor=request.user, complaint_id=pk)
        return self._detail(complaint)


class RemarkViewSet(viewsets.GenericViewSet):
    """Corrections to an existing remark by its author or an admin."""

    queryset = Remark.objects.all()
    serializer_class = RemarkInputSerializer
    permission_classes = [IsAuthenticated]

    def partial_update(self, request, pk=None):
        data = validated(RemarkInputSerializer(data=request.data, partial=True))
        entry = remark_service.edit_remark(remark_id=pk, actor=request.user, **data)
        return Response(RemarkSerializer(entry).data)

    def destroy(self, request, pk=None):
        remark_service.delete_remark(remark_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class StatsViewSet(viewsets.ViewSet):
    """Dashboard counters."""

    permission_classes = [IsAuthenticated]

    @classmethod
    def as_view(cls, *args, **kwargs):
        # Read-only; outside ATOMIC_REQUESTS the counters are served from the cache
        return transaction.non_atomic_requests(super().as_view(*args, **kwargs))

    @action(detail=False, methods=['get'], permission_classes=[IsComplaintAdmin])
    def dashboard(self, request):
        return Response(stats_service.get_dashboard_stats())

    @action(detail=False, methods=['get'], permission_classes=[IsComplaintAdmin])
    def technicians(self, request):
        return Response(stats_service.get_technician_stats())

    @action(detail=False, methods=['get'], permission_classes=[IsTechnician])
    def mine(self, request):
        return Response(stats_service.get_technician_own_stats(request.user))
