from django.contrib import admin
from .models import Poliklinik, Doctor, DoctorSchedule, DoctorLeave, Counter, DailyQuota, Ticket


@admin.register(Poliklinik)
class PoliklinikAdmin(admin.ModelAdmin):
    list_display = ('name', 'queue_code', 'is_active')
    search_fields = ('name', 'queue_code')


class DoctorScheduleInline(admin.TabularInline):
    model = DoctorSchedule
    extra = 1


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('name', 'poliklinik', 'specialist')
    list_filter = ('poliklinik',)
    search_fields = ('name',)
    inlines = [DoctorScheduleInline]


@admin.register(DoctorLeave)
class DoctorLeaveAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'date', 'reason')
    list_filter = ('date',)


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ('name',)


@admin.register(DailyQuota)
class DailyQuotaAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'date', 'status', 'current_count', 'max_quota')
    list_filter = ('date', 'status')
    # current_count only moves through ticket issuance
    readonly_fields = ('current_count',)


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ('queue_code', 'daily_quota', 'status', 'counter_name', 'created_at')
    list_filter = ('status', 'daily_quota__date')
    search_fields = ('queue_code',)
