"""
BillingCore Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("dashboard/summary", views.dashboard_summary_view),
    path("dashboard/revenue", views.revenue_trend_view),
    path("activity", views.recent_activity_view),
    path("branches", views.branches_list_view),
    path("employees", views.employees_list_view),
    path("customer-groups", views.customer_groups_list_view),
    path("products", views.products_list_view),
    path("products/create", views.product_create_view),
    path("products/<int:product_id>/stock-status", views.stock_status_view),
    path("products/<int:product_id>/adjust-stock", views.stock_adjust_view),
    path("sales", views.sales_list_view),
    path("sales/record", views.sale_record_view),
]
