from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django_filters.utils import translate_validation
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import get_or_404
from .filters import SaleFilter
from .models import Sale
from .serializers import SaleSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List sales newest-first or post a new sale"""
    if request.method == 'GET':
        queryset = Sale.objects.select_related('customer').prefetch_related('items', 'items__product')
        filterset = SaleFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        queryset = filterset.qs.order_by('-date', '-id')
        serializer = SaleSerializer(queryset, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = SaleSerializer(data=request.data)
        if serializer.is_valid():
            sale = serializer.save(created_by=request.user)
            return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve a sale with its items"""
    sale = get_or_404(
        Sale.objects.select_related('customer').prefetch_related('items', 'items__product'),
        pk=pk
    )
    return Response(SaleSerializer(sale).data)
