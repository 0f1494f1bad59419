from django.contrib import admin

from .models import Prescription, PrescriptionItem


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0
    readonly_fields = ('uuid', 'created_at')


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'prescribed_at', 'doctor', 'patient', 'appointment')
    search_fields = ('patient__name', 'notes', 'items__drug_name')
    readonly_fields = ('uuid', 'created_at', 'updated_at')
    inlines = [PrescriptionItemInline]
