from django.contrib import admin
from .models import Medicine, Prescription, PrescriptionItem


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'category', 'unit', 'price', 'stock')
    search_fields = ('name', 'code')
    list_filter = ('category',)


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0
    readonly_fields = ('actual_price', 'dispensed_qty', 'shortfall_qty')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'doctor', 'status', 'needs_review', 'created_at')
    list_filter = ('status', 'needs_review')
    search_fields = ('patient_name', 'medical_record_no')
    inlines = [PrescriptionItemInline]
