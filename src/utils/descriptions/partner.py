partner_tag_description = "Mitra usaha bandara."

get_partners_description = "Daftar mitra, diurutkan berdasarkan nama."

get_partner_description = "Data mitra berdasarkan ID."

create_partner_description = "Menambah mitra. Total transaksi dan nilai transaksi dimulai dari nol."

recalculate_partner_description = (
    """
    **Menghitung ulang total mitra.**<br>
    <br>
    Total transaksi dan nilai transaksi dihitung ulang dari data pendapatan.
    """
)
