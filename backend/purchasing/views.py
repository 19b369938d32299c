from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django_filters.utils import translate_validation
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import get_or_404
from .filters import PurchaseFilter
from .models import Purchase
from .serializers import PurchaseSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_list_create(request):
    """List purchases newest-first or post a new purchase"""
    if request.method == 'GET':
        queryset = Purchase.objects.select_related('supplier').prefetch_related('items', 'items__product')
        filterset = PurchaseFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        queryset = filterset.qs.order_by('-date', '-id')
        serializer = PurchaseSerializer(queryset, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = PurchaseSerializer(data=request.data)
        if serializer.is_valid():
            purchase = serializer.save(created_by=request.user)
            return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_detail(request, pk):
    """Retrieve a purchase with its items"""
    purchase = get_or_404(
        Purchase.objects.select_related('supplier').prefetch_related('items', 'items__product'),
        pk=pk
    )
    return Response(PurchaseSerializer(purchase).data)
