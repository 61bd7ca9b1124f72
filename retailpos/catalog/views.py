import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from retailpos.core.utils import (
    create_audit_log, scope_to_department, department_for_write,
    get_department_object_or_404, paginate
)
from retailpos.departments.models import BusinessSettings
from .filters import ProductFilter
from .label_generator import generate_product_label
from .models import Category, Product, ProductVariant, Service
from .serializers import CategorySerializer, ProductSerializer, ProductVariantSerializer, ServiceSerializer

logger = logging.getLogger(__name__)

PRICE_FIELDS = ('price', 'selling_price', 'cost_price', 'wholesale_price')


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List categories of the active department or create one"""
    if request.method == 'GET':
        queryset = scope_to_department(Category.objects.all(), request, include_global=True)
        category_type = request.query_params.get('type')
        if category_type:
            queryset = queryset.filter(type=category_type)
        serializer = CategorySerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = CategorySerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        category = serializer.save(department_id=department_id)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_department_object_or_404(Category, request, pk=pk)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """
    List products of the active department or create a new product.

    Archived products are hidden unless ``archived`` is given. Passing
    ``page`` switches the response to the paginated envelope.
    """
    if request.method == 'GET':
        queryset = scope_to_department(
            Product.objects.select_related('category', 'supplier', 'department').prefetch_related('variants'),
            request
        )
        if 'archived' not in request.query_params:
            queryset = queryset.filter(is_archived=False)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('name')

        if 'page' in request.query_params:
            return Response(paginate(queryset, request, ProductSerializer))
        return Response(ProductSerializer(queryset, many=True).data)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        product = serializer.save(department_id=department_id)
        logger.info(f"Product {product.id} '{product.name}' created by {request.user.username}")
        create_audit_log(request, 'create', 'Product', product.id, object_name=product.name,
                         department_id=department_id)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_department_object_or_404(
        Product.objects.select_related('category', 'supplier', 'department'), request, pk=pk
    )

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        old_prices = {field: str(getattr(product, field)) for field in PRICE_FIELDS}
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            product = serializer.save()
            new_prices = {field: str(getattr(product, field)) for field in PRICE_FIELDS}
            changed = {f: {'old': old_prices[f], 'new': new_prices[f]}
                       for f in PRICE_FIELDS if old_prices[f] != new_prices[f]}
            if changed:
                create_audit_log(request, 'price_change', 'Product', product.id, changes=changed,
                                 object_name=product.name, department_id=product.department_id)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if product.sale_items.exists():
            return Response(
                {'error': 'Product has sales history. Archive it instead of deleting.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request, 'delete', 'Product', product.id, object_name=product.name,
                         department_id=product.department_id)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _set_archived(request, pk, archived):
    product = get_department_object_or_404(Product, request, pk=pk)
    product.is_archived = archived
    product.save(update_fields=['is_archived', 'updated_at'])
    create_audit_log(request, 'update', 'Product', product.id, changes={'is_archived': archived},
                     object_name=product.name, department_id=product.department_id)
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_archive(request, pk):
    """Hide a product from the till without losing its history"""
    return _set_archived(request, pk, True)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_unarchive(request, pk):
    return _set_archived(request, pk, False)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_label(request, pk):
    """Barcode shelf label for a product as a PNG data URL"""
    product = get_department_object_or_404(Product.objects.select_related('department'), request, pk=pk)
    barcode_value = product.barcode or product.internal_barcode
    currency = BusinessSettings.for_department(product.department_id).currency
    label = generate_product_label(
        product_name=product.name,
        barcode_value=barcode_value,
        price_text=f"{currency} {int(product.effective_price):,}",
        department_name=product.department.name,
    )
    return Response({'product_id': product.id, 'barcode': barcode_value, 'label': label})


# Variant views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_variant_list_create(request, pk):
    """List or add variants of a product"""
    product = get_department_object_or_404(Product, request, pk=pk)

    if request.method == 'GET':
        serializer = ProductVariantSerializer(product.variants.all(), many=True)
        return Response(serializer.data)

    serializer = ProductVariantSerializer(data=request.data)
    if serializer.is_valid():
        variant = serializer.save(product=product)
        return Response(ProductVariantSerializer(variant).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def variant_detail(request, pk):
    """Retrieve, update or delete a product variant"""
    variant = get_department_object_or_404(
        ProductVariant.objects.select_related('product'), request,
        department_attr='product.department_id', pk=pk
    )

    if request.method == 'GET':
        return Response(ProductVariantSerializer(variant).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductVariantSerializer(variant, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        variant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Service views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def service_list_create(request):
    """List services of the active department or create one"""
    if request.method == 'GET':
        queryset = scope_to_department(Service.objects.select_related('category'), request)
        if request.query_params.get('active') == 'true':
            queryset = queryset.filter(is_active=True)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(name__icontains=search)
        return Response(ServiceSerializer(queryset, many=True).data)

    serializer = ServiceSerializer(data=request.data)
    if serializer.is_valid():
        department_id = department_for_write(request, request.data.get('department'))
        service = serializer.save(department_id=department_id)
        return Response(ServiceSerializer(service).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def service_detail(request, pk):
    """Retrieve, update or delete a service"""
    service = get_department_object_or_404(Service, request, pk=pk)

    if request.method == 'GET':
        return Response(ServiceSerializer(service).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ServiceSerializer(service, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        service.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
