revenue_tag_description = "Pendapatan bandara: buku besar transaksi dan agregasinya."

get_revenues_description = (
    """
    **Daftar pendapatan.**<br>
    <br>
    Data diurutkan berdasarkan tanggal (terbaru lebih dulu), lalu waktu pembuatan.<br>
    <br>
    **year** - tahun transaksi.<br>
    **month** - bulan transaksi, hanya berlaku bersama **year**.<br>
    **category** - kategori (aeronautika, non-aeronautika).<br>
    **payment_status** - status pembayaran (paid, pending, overdue).<br>
    **page**, **limit** - paginasi.
    """
)

get_monthly_detail_description = (
    """
    **Rincian pendapatan untuk satu bulan.**<br>
    <br>
    Ringkasan per kategori, daftar transaksi serta rincian per mitra dan per jenis layanan.<br>
    <br>
    **year**, **month** - wajib.<br>
    **partner** - bagian dari nama mitra, tanpa memperhatikan huruf besar/kecil.<br>
    **sort** - date, amount, service_type, category, payment_status, invoice_number, created_at.<br>
    **order** - ASC atau DESC.
    """
)

get_monthly_summary_description = (
    """
    **Ringkasan pendapatan per bulan dalam satu tahun.**<br>
    <br>
    Selalu 12 elemen (Jan - Dec), bulan tanpa transaksi bernilai nol.
    """
)

get_yearly_summary_description = (
    """
    **Ringkasan tahunan.**<br>
    <br>
    Total per kategori dan status pembayaran, 10 jenis layanan dan 10 mitra teratas.
    """
)

get_stats_overview_description = (
    """
    **Statistik tahunan.**<br>
    <br>
    Pertumbuhan dihitung terhadap tahun sebelumnya, bernilai 0 jika tahun sebelumnya kosong.
    """
)

get_revenue_description = "Data pendapatan berdasarkan ID."

create_revenue_description = (
    """
    **Menambah data pendapatan.**<br>
    <br>
    Mitra harus terdaftar. Nomor invoice harus unik.
    """
)

edit_revenue_description = (
    """
    **Mengubah data pendapatan.**<br>
    <br>
    Hanya field yang dikirim yang diubah.
    """
)

delete_revenue_description = (
    """
    **Menghapus data pendapatan.**<br>
    <br>
    Total transaksi dan nilai transaksi mitra dikurangi dalam transaksi yang sama.
    """
)

bulk_delete_revenues_description = (
    """
    **Menghapus beberapa data pendapatan sekaligus.**<br>
    <br>
    ID yang tidak ditemukan diabaikan.
    """
)
