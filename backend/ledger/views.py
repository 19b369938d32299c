from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.utils import translate_validation
from backend.core.utils import get_or_404
from backend.parties.models import Customer
from .filters import TransactionFilter
from .models import Transaction
from .serializers import TransactionSerializer, DebtPaymentSerializer
from .services import create_transaction, post_debt_payment


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transaction_list_create(request):
    """List transactions newest-first or record a new one"""
    if request.method == 'GET':
        queryset = Transaction.objects.select_related('customer', 'supplier', 'created_by')
        filterset = TransactionFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        queryset = filterset.qs.order_by('-date', '-id')

        serializer = TransactionSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = TransactionSerializer(data=request.data)
        if serializer.is_valid():
            txn = create_transaction(serializer.validated_data, user=request.user)
            return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_detail(request, pk):
    """Retrieve a transaction"""
    txn = get_or_404(Transaction.objects.select_related('customer', 'supplier', 'created_by'), pk=pk)
    return Response(TransactionSerializer(txn).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def customer_payment(request, pk):
    """Receive a payment against a customer's debt"""
    customer = get_or_404(Customer, pk=pk)
    serializer = DebtPaymentSerializer(data=request.data)
    if serializer.is_valid():
        txn = post_debt_payment(
            customer,
            serializer.validated_data['amount'],
            description=serializer.validated_data['description'],
            date=serializer.validated_data['date'],
            user=request.user,
        )
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
